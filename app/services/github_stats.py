"""
app/services/github_stats.py — GitHub top-languages aggregator
===============================================================
Paginates the authenticated user's repositories, sums the per-language byte
counts reported by each repo's languages_url, keeps the top N languages and
expresses each as a share of the top-N total ("41.27%").

Depends on:
- requests for HTTP calls
- db.cache.ContentCache for the {data, last_updated} entry
"""

import logging
from typing import Dict, Iterable, List, Optional

import requests

from db.cache import CacheEntry, ContentCache

log = logging.getLogger(__name__)

CACHE_KEY = "github-top-languages"


class GithubStatsError(RuntimeError):
    pass


def aggregate_languages(
    language_maps: Iterable[Dict[str, int]],
    excluded: Iterable[str] = ("C#", "Rust"),
    top_n: int = 6,
) -> Dict[str, str]:
    """
    Reduce per-repo {language: bytes} maps into {language: "xx.xx%"}.

    Percentages are relative to the sum of the kept top-N languages, so the
    result always adds up to ~100% regardless of how many languages were cut.
    """
    excluded = set(excluded)
    totals: Dict[str, int] = {}
    for languages in language_maps:
        for language, size in languages.items():
            if language in excluded:
                continue
            totals[language] = totals.get(language, 0) + size

    top = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:top_n]
    top_total = sum(size for _, size in top)
    if not top_total:
        return {}
    return {language: f"{size / top_total * 100:.2f}%" for language, size in top}


class GithubStatsService:
    def __init__(self, config: dict, cache: ContentCache, session: Optional[requests.Session] = None):
        gh_cfg = config.get("github", {})
        self.token = gh_cfg.get("token", "")
        self.api_url = gh_cfg.get("api_url", "https://api.github.com").rstrip("/")
        self.per_page = gh_cfg.get("per_page", 100)
        self.top_n = gh_cfg.get("top_n", 6)
        self.excluded = gh_cfg.get("excluded_languages", ["C#", "Rust"])
        self.cache = cache
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _get_json(self, url: str):
        response = self.session.get(url, headers=self._headers(), timeout=30)
        if not response.ok:
            raise GithubStatsError(f"Failed to fetch {url}: {response.status_code}")
        return response.json()

    def fetch_all_repos(self) -> List[dict]:
        """Fetch every repo page until one comes back short."""
        repos: List[dict] = []
        page = 1
        while True:
            url = f"{self.api_url}/user/repos?per_page={self.per_page}&page={page}"
            data = self._get_json(url)
            repos.extend(data)
            if len(data) < self.per_page:
                break
            page += 1
        return repos

    def compute(self) -> Dict[str, str]:
        repos = self.fetch_all_repos()
        log.info(f"Aggregating languages across {len(repos)} repositories")
        language_maps = [self._get_json(repo["languages_url"]) for repo in repos]
        return aggregate_languages(language_maps, self.excluded, self.top_n)

    def refresh(self) -> CacheEntry:
        """Recompute and store; errors propagate to the caller."""
        entry = self.cache.set(CACHE_KEY, self.compute())
        log.info(f"Top languages cache updated at {entry.last_updated.isoformat()}")
        return entry

    def get_top_languages(self) -> Dict[str, str]:
        entry = self.cache.get(CACHE_KEY)
        if entry is not None and entry.data is not None:
            return entry.data
        log.info("No cached top languages data. Updating now...")
        return self.refresh().data
