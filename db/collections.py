"""
db/collections.py — Collection Registry
========================================

One place that knows every MongoDB collection the portfolio uses and how the
API addresses it.

Content resources (soft-deleted, cached, counted):
  project          → projectTable           (link: projectLink)
  involvement      → involvementTable       (link: involvementLink)
  experience       → experienceTable        (link: experienceLink)
  yearinreview     → yearInReviewTable      (link: yearInReviewLink)
  honorsexperience → honorsExperienceTable  (link: honorsExperienceLink)
  skill            → skillsCollection
  skillgraph       → skillGraphs

Special collections:
  FeedTable         → feeds (hard delete)
  timelineTable     → canvas timeline events
  aboutMeTable      → singleton "about me" section
  settingsTable     → singleton resume URL + social links
  KalePortfolio     → singleton admin credentials (bcrypt hashes)
  KalePortfolioOTP  → singleton one-time password
"""

from dataclasses import dataclass
from typing import Optional

PROJECTS      = "projectTable"
INVOLVEMENTS  = "involvementTable"
EXPERIENCES   = "experienceTable"
YEAR_REVIEWS  = "yearInReviewTable"
HONORS        = "honorsExperienceTable"
SKILLS        = "skillsCollection"
SKILL_GRAPHS  = "skillGraphs"
FEEDS         = "FeedTable"
TIMELINE      = "timelineTable"
ABOUT_ME      = "aboutMeTable"
SETTINGS      = "settingsTable"
ADMIN         = "KalePortfolio"
ADMIN_OTP     = "KalePortfolioOTP"

# Cache key for the aggregated counts (not a real collection)
COUNTS_CACHE_KEY = "collection-counts"


@dataclass(frozen=True)
class Resource:
    """How one content collection is exposed over the API."""
    key:         str               # route stem: add<key>, update<key>/{id}
    plural:      str               # get<plural>
    collection:  str
    label:       str               # human name used in messages
    link_field:  Optional[str] = None
    title_field: Optional[str] = None
    image_field: Optional[str] = None


RESOURCES = [
    Resource("project", "projects", PROJECTS, "Project",
             link_field="projectLink", title_field="projectTitle",
             image_field="projectImages"),
    Resource("involvement", "involvements", INVOLVEMENTS, "Involvement",
             link_field="involvementLink", title_field="involvementTitle",
             image_field="involvementImages"),
    Resource("experience", "experiences", EXPERIENCES, "Experience",
             link_field="experienceLink", title_field="experienceTitle",
             image_field="experienceImages"),
    Resource("yearinreview", "yearinreviews", YEAR_REVIEWS, "Year in Review",
             link_field="yearInReviewLink", title_field="yearInReviewTitle",
             image_field="yearInReviewImages"),
    Resource("honorsexperience", "honorsexperiences", HONORS, "Honors experience",
             link_field="honorsExperienceLink", title_field="honorsExperienceTitle",
             image_field="honorsExperienceImages"),
    Resource("skill", "skills", SKILLS, "Skill"),
    Resource("skillgraph", "skillgraphs", SKILL_GRAPHS, "Skill graph"),
]

RESOURCES_BY_KEY = {r.key: r for r in RESOURCES}

# addLike {type} → (collection, title field)
LIKE_TARGETS = {
    "Project":      (PROJECTS, "projectTitle"),
    "Experience":   (EXPERIENCES, "experienceTitle"),
    "Involvement":  (INVOLVEMENTS, "involvementTitle"),
    "Honors":       (HONORS, "honorsExperienceTitle"),
    "YearInReview": (YEAR_REVIEWS, "yearInReviewTitle"),
    "Feed":         (FEEDS, "feedTitle"),
}

# Sources for the dynamic image preload list: (collection, image field)
IMAGE_SOURCES = [
    (EXPERIENCES, "experienceImages"),
    (HONORS, "honorsExperienceImages"),
    (INVOLVEMENTS, "involvementImages"),
    (PROJECTS, "projectImages"),
    (YEAR_REVIEWS, "yearInReviewImages"),
    (FEEDS, "feedImageURL"),
]

# Collections reported by /getCollectionCounts. ADMIN is counted without
# the soft-delete filter.
COUNTED_COLLECTIONS = [
    SKILLS, SKILL_GRAPHS, PROJECTS, EXPERIENCES, INVOLVEMENTS,
    HONORS, YEAR_REVIEWS, ADMIN, FEEDS, TIMELINE,
]
UNFILTERED_COUNTS = {ADMIN}

# Collections a client may reorder via POST /reorder
REORDERABLE = {r.collection for r in RESOURCES} | {FEEDS, TIMELINE}
