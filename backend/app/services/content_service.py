"""
Lookup and filtering over the static marketing catalogue.

All functions take an optional source list so tests can run them against
their own fixtures; by default they read the module catalogue.
"""

from typing import Dict, List, Optional, Sequence

from app.schemas.content import Article, ArticleCategoryCount, Integration, Template, TemplateFilters
from app.services.content_catalog import ARTICLES, INTEGRATIONS, TEMPLATES


# ============================================
# Articles
# ============================================

def _newest_first(articles: Sequence[Article]) -> List[Article]:
    return sorted(articles, key=lambda a: a.published_at, reverse=True)


def get_all_articles(articles: Sequence[Article] = ARTICLES) -> List[Article]:
    return _newest_first(articles)


def get_featured_articles(articles: Sequence[Article] = ARTICLES) -> List[Article]:
    return [a for a in articles if a.featured]


def get_articles_by_category(category: str, articles: Sequence[Article] = ARTICLES) -> List[Article]:
    return _newest_first([a for a in articles if a.category == category])


def get_article_by_slug(slug: str, articles: Sequence[Article] = ARTICLES) -> Optional[Article]:
    return next((a for a in articles if a.id == slug), None)


def get_related_articles(article: Article, limit: int = 3, articles: Sequence[Article] = ARTICLES) -> List[Article]:
    """Articles sharing the category or at least one tag, excluding the article itself"""
    tags = set(article.tags)
    related = [
        a for a in articles
        if a.id != article.id and (a.category == article.category or tags.intersection(a.tags))
    ]
    return related[:limit]


def _category_label(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.split("-"))


def get_article_categories(articles: Sequence[Article] = ARTICLES) -> List[ArticleCategoryCount]:
    counts: Dict[str, int] = {}
    for article in articles:
        counts[article.category] = counts.get(article.category, 0) + 1
    return [
        ArticleCategoryCount(value=value, label=_category_label(value), count=count)
        for value, count in counts.items()
    ]


# ============================================
# Templates
# ============================================

def _matches_template(template: Template, query: str) -> bool:
    q = query.lower()
    return (
        q in template.title.lower()
        or q in template.description.lower()
        or any(q in tag.lower() for tag in template.tags)
    )


def get_all_templates(templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return list(templates)


def get_template_by_id(template_id: str, templates: Sequence[Template] = TEMPLATES) -> Optional[Template]:
    return next((t for t in templates if t.id == template_id), None)


def get_featured_templates(templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return [t for t in templates if t.featured]


def get_popular_templates(templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return [t for t in templates if t.popular]


def get_new_templates(templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return [t for t in templates if t.new]


def get_templates_by_category(category: str, templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return [t for t in templates if t.category == category]


def search_templates(query: str, templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    return [t for t in templates if _matches_template(t, query)]


def filter_templates(filters: TemplateFilters, templates: Sequence[Template] = TEMPLATES) -> List[Template]:
    filtered = list(templates)

    if filters.category:
        filtered = [t for t in filtered if t.category == filters.category]
    if filters.complexity:
        filtered = [t for t in filtered if t.complexity == filters.complexity]
    if filters.search:
        filtered = [t for t in filtered if _matches_template(t, filters.search)]

    # Stable sorts: popular keeps catalogue order within each group
    if filters.sort_by == "newest":
        filtered.sort(key=lambda t: t.created_at, reverse=True)
    elif filters.sort_by == "popular":
        filtered.sort(key=lambda t: not t.popular)
    elif filters.sort_by == "alphabetical":
        filtered.sort(key=lambda t: t.title.lower())

    return filtered


# ============================================
# Integrations
# ============================================

def get_all_integrations(integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    return list(integrations)


def get_integration_by_id(integration_id: str, integrations: Sequence[Integration] = INTEGRATIONS) -> Optional[Integration]:
    return next((i for i in integrations if i.id == integration_id), None)


def get_integrations_by_category(category: str, integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    return [i for i in integrations if i.category == category]


def get_integrations_by_status(status: str, integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    return [i for i in integrations if i.status == status]


def get_available_integrations(integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    return get_integrations_by_status("available", integrations)


def get_popular_integrations(integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    return [i for i in integrations if i.popular]


def search_integrations(query: str, integrations: Sequence[Integration] = INTEGRATIONS) -> List[Integration]:
    q = query.lower()
    return [
        i for i in integrations
        if q in i.name.lower()
        or q in i.description.lower()
        or any(q in feature.lower() for feature in i.features)
    ]
