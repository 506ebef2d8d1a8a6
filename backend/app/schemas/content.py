from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import date


ArticleCategory = Literal["tutorials", "ai-insights", "best-practices", "product-updates", "customer-stories"]
TemplateCategory = Literal["business", "sales", "marketing", "startup", "education", "creative"]
ComplexityLevel = Literal["basic", "intermediate", "advanced"]
AgentType = Literal["director", "scripter", "graphic-artist", "data-visualizer"]
TemplateSort = Literal["newest", "popular", "alphabetical"]
IntegrationCategory = Literal["export", "storage", "communication", "content", "productivity"]
IntegrationStatus = Literal["available", "coming-soon", "beta"]


# ==================== Articles ====================

class ArticleAuthor(BaseModel):
    name: str
    role: str
    avatar: Optional[str] = None


class Article(BaseModel):
    id: str
    title: str
    excerpt: str
    content: str
    category: ArticleCategory
    author: ArticleAuthor
    published_at: date
    read_time: int  # minutes
    featured: bool = False
    tags: List[str] = []
    cover_image: str


class ArticleCategoryCount(BaseModel):
    value: ArticleCategory
    label: str
    count: int


# ==================== Templates ====================

class Template(BaseModel):
    id: str
    title: str
    description: str
    category: TemplateCategory
    complexity: ComplexityLevel
    slide_count: int
    thumbnail: str
    agents: List[AgentType] = []
    featured: bool = False
    popular: bool = False
    new: bool = False
    tags: List[str] = []
    created_at: date


class TemplateFilters(BaseModel):
    category: Optional[TemplateCategory] = None
    complexity: Optional[ComplexityLevel] = None
    search: Optional[str] = None
    sort_by: Optional[TemplateSort] = None


# ==================== Integrations ====================

class Integration(BaseModel):
    id: str
    name: str
    description: str
    category: IntegrationCategory
    status: IntegrationStatus
    logo: str
    features: List[str] = []
    setup_difficulty: Literal["easy", "moderate", "advanced"] = "easy"
    documentation: Optional[str] = None
    popular: bool = False
