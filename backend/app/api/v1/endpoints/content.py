"""
Marketing content: blog articles, the template gallery and integrations.
Public and read-only.
"""
from fastapi import APIRouter, Query
from typing import List, Optional

from app.core.exceptions import ContentNotFoundError
from app.schemas.content import (
    Article,
    ArticleCategory,
    ArticleCategoryCount,
    ComplexityLevel,
    Integration,
    IntegrationCategory,
    IntegrationStatus,
    Template,
    TemplateCategory,
    TemplateFilters,
    TemplateSort,
)
from app.services import content_service

router = APIRouter()


# ==================== Articles ====================

@router.get("/articles", response_model=List[Article])
async def list_articles(
    category: Optional[ArticleCategory] = None,
    featured: bool = False
):
    if featured:
        return content_service.get_featured_articles()
    if category:
        return content_service.get_articles_by_category(category)
    return content_service.get_all_articles()


@router.get("/articles/categories", response_model=List[ArticleCategoryCount])
async def list_article_categories():
    return content_service.get_article_categories()


@router.get("/articles/{slug}", response_model=Article)
async def get_article(slug: str):
    article = content_service.get_article_by_slug(slug)
    if article is None:
        raise ContentNotFoundError("article", slug)
    return article


@router.get("/articles/{slug}/related", response_model=List[Article])
async def get_related_articles(slug: str, limit: int = Query(3, ge=1, le=10)):
    article = content_service.get_article_by_slug(slug)
    if article is None:
        raise ContentNotFoundError("article", slug)
    return content_service.get_related_articles(article, limit=limit)


# ==================== Templates ====================

@router.get("/templates", response_model=List[Template])
async def list_templates(
    category: Optional[TemplateCategory] = None,
    complexity: Optional[ComplexityLevel] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort_by: Optional[TemplateSort] = None
):
    """Gallery listing; with no filters this is the full catalogue in its curated order"""
    return content_service.filter_templates(TemplateFilters(
        category=category,
        complexity=complexity,
        search=search,
        sort_by=sort_by,
    ))


@router.get("/templates/featured", response_model=List[Template])
async def list_featured_templates():
    return content_service.get_featured_templates()


@router.get("/templates/popular", response_model=List[Template])
async def list_popular_templates():
    return content_service.get_popular_templates()


@router.get("/templates/new", response_model=List[Template])
async def list_new_templates():
    return content_service.get_new_templates()


@router.get("/templates/{template_id}", response_model=Template)
async def get_template(template_id: str):
    template = content_service.get_template_by_id(template_id)
    if template is None:
        raise ContentNotFoundError("template", template_id)
    return template


# ==================== Integrations ====================

@router.get("/integrations", response_model=List[Integration])
async def list_integrations(
    category: Optional[IntegrationCategory] = None,
    status: Optional[IntegrationStatus] = None,
    search: Optional[str] = Query(None, max_length=100)
):
    if search:
        integrations = content_service.search_integrations(search)
    else:
        integrations = content_service.get_all_integrations()
    if category:
        integrations = [i for i in integrations if i.category == category]
    if status:
        integrations = [i for i in integrations if i.status == status]
    return integrations


@router.get("/integrations/popular", response_model=List[Integration])
async def list_popular_integrations():
    return content_service.get_popular_integrations()


@router.get("/integrations/{integration_id}", response_model=Integration)
async def get_integration(integration_id: str):
    integration = content_service.get_integration_by_id(integration_id)
    if integration is None:
        raise ContentNotFoundError("integration", integration_id)
    return integration
