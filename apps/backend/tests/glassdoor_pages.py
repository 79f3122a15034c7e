"""
HTML builders for Glassdoor page fixtures.
"""
import json
from typing import Dict, List, Optional

BASE_URL = "https://www.glassdoor.com"


def _next_link(next_href: Optional[str]) -> str:
    if not next_href:
        return '<div id="FooterPageNav"><ul><li class="next"><span>Next</span></li></ul></div>'
    return f'<div id="FooterPageNav"><ul><li class="next"><a href="{next_href}">Next</a></li></ul></div>'


def job_search_page(jobs: List[Dict], count_text: Optional[str] = None, next_href: Optional[str] = None) -> str:
    items = []
    for job in jobs:
        items.append(f"""
        <li class="jl" data-id="{job['id']}">
          <div class="logoWrap"><a href="{job.get('href', '/partner/jobListing.htm?jobListingId=' + str(job['id']))}">logo</a></div>
          <div class="jobInfoItem jobEmpolyerName">{job.get('employer', 'Acme')}</div>
          <span class="compactStars">{job.get('rating', '4.1')}</span>
          <span class="subtle loc">{job.get('location', 'Austin, TX')}</span>
          <span class="salaryText"> {job.get('salary', '$90K-$120K')} </span>
          <a class="jobLink" href="{job.get('href', '/partner/jobListing.htm?jobListingId=' + str(job['id']))}">{job.get('title', 'Engineer')}</a>
        </li>""")
    count = f'<p class="jobsCount">{count_text}</p>' if count_text is not None else ""
    return f"""
    <html><body>
      {count}
      <ul class="jlGrid">{''.join(items)}</ul>
      {_next_link(next_href)}
    </body></html>"""


def company_search_page(employers: List[Dict], count_text: Optional[str] = None, next_href: Optional[str] = None) -> str:
    modules = []
    for employer in employers:
        modules.append(f"""
        <div class="eiHdrModule" data-emp-id="{employer['id']}">
          <div class="margBotXs"><a href="{employer['href']}"> {employer.get('name', 'Acme')} </a></div>
          <span class="bigRating strong margRtSm h1">{employer.get('rating', '3.8')}</span>
        </div>""")
    count = ""
    if count_text is not None:
        count = f'<div class="count margBot floatLt tightBot"><strong>1</strong> to <strong>10</strong> of <strong>{count_text}</strong></div>'
    return f"<html><body>{count}{''.join(modules)}{_next_link(next_href)}</body></html>"


def employer_jobs_page(jobs: List[Dict]) -> str:
    containers = []
    for job in jobs:
        link = f'<a class="JobDetailsStyles__jobTitle" href="{job["href"]}">open</a>' if job.get("href") else ""
        containers.append(f"""
        <div class="JobsListItemStyles__jobDetailsContainer">
          {link}
          <a class="JobDetailsStyles__iconLink">{job.get('title', 'Engineer')}</a>
        </div>""")
    return f"<html><body>{''.join(containers)}</body></html>"


def jsonld_page(data, body: str = "") -> str:
    return f"""
    <html><head>
      <script type="application/ld+json">{json.dumps(data)}</script>
    </head><body>{body}</body></html>"""


def job_list_page(job_url: str) -> str:
    return jsonld_page({
        "@context": "http://schema.org",
        "@type": "ItemList",
        "itemListElement": [{"@type": "ListItem", "position": 1, "url": job_url}],
    })


def job_detail_page(posting: Dict, employer_id: Optional[str] = "100", overview_href: Optional[str] = "/Overview/Working-at-Acme-EI_IE100.11,15.htm") -> str:
    hero = f'<div id="EmpHero" data-employer-id="{employer_id}"></div>' if employer_id else ""
    logo = f'<div class="logo cell"><a href="{overview_href}">Acme</a></div>' if overview_href else ""
    return jsonld_page(posting, body=hero + logo)


def job_posting(url: str, **overrides) -> Dict:
    posting = {
        "@context": "http://schema.org",
        "@type": "JobPosting",
        "title": "Engineer",
        "url": url,
        "datePosted": "2019-03-01",
        "description": "&lt;p&gt;Build &amp;amp; ship&lt;/p&gt;",
        "jobLocation": {"@type": "Place", "address": {"addressLocality": "Austin", "addressRegion": "TX"}},
        "estimatedSalary": {"@type": "MonetaryAmount", "currency": "USD"},
        "hiringOrganization": {"@type": "Organization", "name": "Acme"},
    }
    posting.update(overrides)
    return posting


def overview_page(profile: Dict[str, str]) -> str:
    entities = "".join(
        f'<div class="infoEntity"><label>{label}</label><span class="value">{value}</span></div>'
        for label, value in profile.items()
    )
    return f'<html><body><div id="EmpBasicInfo">{entities}</div></body></html>'
