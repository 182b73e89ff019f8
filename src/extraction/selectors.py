"""Job page DOM selector constants with fallbacks.

Ordered by stability: data-* / itemprop > ids > class names > generic tags.
Each constant is a tuple so callers iterate until a match is found.
"""

# --- Job title ---
TITLE_SELECTORS: tuple[str, ...] = (
    '[data-testid="job-title"]',
    '[itemprop="title"]',
    "h1.top-card-layout__title",
    "h1.jobsearch-JobInfoHeader-title",
    ".job-title",
    ".posting-headline h2",
    "h1",
)

# --- Company name ---
COMPANY_SELECTORS: tuple[str, ...] = (
    '[data-testid="company-name"]',
    '[itemprop="hiringOrganization"] [itemprop="name"]',
    "a.topcard__org-name-link",
    '[data-company-name="true"]',
    ".company-name",
    ".company",
)

# Fallback for company when no element matches.
COMPANY_META_PROPERTIES: tuple[str, ...] = (
    "og:site_name",
)

# --- Description ---
DESCRIPTION_SELECTORS: tuple[str, ...] = (
    '[data-testid="job-description"]',
    '[itemprop="description"]',
    "#jobDescriptionText",
    "div.show-more-less-html__markup",
    "#job-description",
    ".job-description",
    ".description",
    "article",
)

# --- Location ---
LOCATION_SELECTORS: tuple[str, ...] = (
    '[data-testid="job-location"]',
    '[itemprop="jobLocation"]',
    "span.topcard__flavor--bullet",
    '[data-testid="inlineHeader-companyLocation"]',
    ".job-location",
    ".location",
)

# --- Salary ---
SALARY_SELECTORS: tuple[str, ...] = (
    '[data-testid="job-salary"]',
    '[itemprop="baseSalary"]',
    "#salaryInfoAndJobType",
    ".salary",
    ".compensation",
)

BODY_SELECTOR = "body"
