"""CSS selectors and in-page scripts for the BNI member directory.

The site is a Material UI application with generated class names, so these
selectors are brittle by nature and kept together in one place.
"""

# Directory listing page
LISTING_SELECTORS = {
    "name": ".MuiBox-root.css-11zcyzm",
    "profile_link": (
        ".MuiTypography-root.MuiTypography-inherit.MuiLink-root"
        ".MuiLink-underlineAlways.css-xpp1g9"
    ),
    "chapter": ".MuiBox-root.css-y8qrj",
    "company": ".MuiBox-root.css-cg3igy",
    "city": ".MuiBox-root.css-gglxne",
    "industry": ".MuiBox-root.css-fhwdqw",
}

# Member profile page
PROFILE_NAME_SELECTOR = "p.MuiTypography-root.MuiTypography-body1.css-s8q61v"
PROFILE_CONTACT_SELECTOR = (
    "div.MuiBox-root.css-ott1zk p.MuiTypography-root.MuiTypography-body1.css-1h6y3d6"
)
PROFILE_LINK_SELECTOR = "a.css-1ejdz4y"
PROFILE_LOCATION_SELECTOR = (
    "div.MuiBox-root.css-1l43wm0 p.MuiTypography-root.MuiTypography-body1.css-jtzytg"
)
PROFILE_BUSINESS_SELECTOR = (
    "div.MuiBox-root.css-qsaw8 p.MuiTypography-root.MuiTypography-body1.css-1sw3fo6"
)

ADDRESS_PATTERN = "road|street|lane|next to|building"

# Query parameters that describe the current directory search
FILTER_QUERY_PARAMS = ("search", "chapter", "industry", "city", "region")


LISTING_SCRIPT = """
(sel) => {
  const texts = (s) => Array.from(document.querySelectorAll(s)).map(e => (e.innerText || '').trim());
  const names = texts(sel.name);
  const links = Array.from(document.querySelectorAll(sel.profile_link)).map(a => a.href || '');
  const chapters = texts(sel.chapter);
  const companies = texts(sel.company);
  const cities = texts(sel.city);
  const industries = texts(sel.industry);
  const count = Math.max(names.length, links.length, chapters.length,
                         companies.length, cities.length, industries.length);
  const rows = [];
  for (let i = 0; i < count; i++) {
    rows.push({
      name: names[i] || '',
      profileLink: links[i] || '',
      chapter: chapters[i] || '',
      company: companies[i] || '',
      city: cities[i] || '',
      industry: industries[i] || '',
      connect: '+',
    });
  }
  return rows;
}
"""

PROFILE_SCRIPT = """
(sel) => {
  const text = (e) => (e && e.textContent ? e.textContent.trim() : '');
  const all = (s) => Array.from(document.querySelectorAll(s));
  const contact = all(sel.contact).map(text);
  const addressRe = new RegExp(sel.addressPattern, 'i');
  const links = all(sel.link);
  const email = links.find(a => a.href.startsWith('mailto:'));
  const website = links.find(a => a.href.startsWith('http'));
  const location = all(sel.location);
  const business = all(sel.business);
  return {
    name: text(document.querySelector(sel.name)),
    phone1: contact[0] || '',
    phone2: contact[1] || '',
    address: contact.find(t => addressRe.test(t)) || '',
    email: text(email),
    website: text(website),
    city: text(location[0]),
    postalCode: text(location[1]),
    country: text(location[2]),
    industry: text(business[0]),
    about: text(business[1]),
    keywords: text(business[2]),
    other: text(business[3]),
  };
}
"""

PROFILE_SCRIPT_ARGS = {
    "name": PROFILE_NAME_SELECTOR,
    "contact": PROFILE_CONTACT_SELECTOR,
    "link": PROFILE_LINK_SELECTOR,
    "location": PROFILE_LOCATION_SELECTOR,
    "business": PROFILE_BUSINESS_SELECTOR,
    "addressPattern": ADDRESS_PATTERN,
}

FILTERS_SCRIPT = """
() => {
  const filters = {};
  const key = (s) => s.toLowerCase().replace(/\\s+/g, '_');
  document.querySelectorAll('input[type="text"], input[type="search"]').forEach((input, i) => {
    const value = (input.value || '').trim();
    if (value) {
      filters['search_' + key(input.placeholder || input.name || input.id || 'search' + (i + 1))] = value;
    }
  });
  document.querySelectorAll('select').forEach((select, i) => {
    if (select.value && select.value !== 'all' && select.value !== '0') {
      const option = select.options[select.selectedIndex];
      filters['filter_' + key(select.name || select.id || 'filter' + (i + 1))] =
        (option && option.text) || select.value;
    }
  });
  document.querySelectorAll('.active, .selected, [aria-selected="true"]').forEach((el, i) => {
    const t = (el.textContent || '').trim();
    if (t && t.length < 50) {
      filters['active_filter_' + (i + 1)] = t;
    }
  });
  if (Object.keys(filters).length === 0) {
    const title = document.title;
    const heading = document.querySelector('h1, h2, .title, .heading');
    const headingText = heading ? (heading.textContent || '').trim() : '';
    if (headingText && headingText !== title) {
      filters.page_context = headingText;
    } else if (title && !title.includes('BNI') && title.length < 100) {
      filters.page_context = title;
    }
  }
  return filters;
}
"""
