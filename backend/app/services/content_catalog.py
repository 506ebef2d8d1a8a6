"""
Static marketing catalogue served by the /content endpoints.

Editing content means editing this module; there is no CMS behind it.
"""

from datetime import date

from app.schemas.content import Article, ArticleAuthor, Integration, Template


ARTICLES = [
    Article(
        id="how-multi-agent-ai-creates-better-presentations",
        title="How Multi-Agent AI Creates Better Presentations",
        excerpt=(
            "Discover how our specialized AI agents work together to create professional "
            "presentations faster and with higher quality than single-AI systems."
        ),
        content=(
            "# How Multi-Agent AI Creates Better Presentations\n\n"
            "Deckster splits presentation work between four agents: the Director plans the "
            "structure, the Scripter writes the copy, the Graphic Artist designs the slides "
            "and the Data Visualizer builds the charts.\n"
        ),
        category="ai-insights",
        author=ArticleAuthor(name="Deckster Team", role="AI Research"),
        published_at=date(2025, 1, 20),
        read_time=6,
        featured=True,
        tags=["multi-agent", "ai", "presentation", "technology"],
        cover_image="/blog/multi-agent-ai.jpg",
    ),
    Article(
        id="deckster-vs-traditional-tools",
        title="Deckster vs Traditional Tools: The Future of Presentation Design",
        excerpt=(
            "A comprehensive comparison of AI-powered presentation creation versus "
            "traditional manual tools."
        ),
        content=(
            "# Deckster vs Traditional Tools\n\n"
            "Manual tools leave structure, copy, layout and charts to you. An AI-native "
            "builder drafts all of them and lets you edit the result slide by slide.\n"
        ),
        category="best-practices",
        author=ArticleAuthor(name="Deckster Team", role="Product"),
        published_at=date(2025, 1, 18),
        read_time=5,
        featured=True,
        tags=["comparison", "traditional-tools", "ai", "productivity"],
        cover_image="/blog/deckster-vs-traditional.jpg",
    ),
    Article(
        id="create-pitch-deck-5-minutes",
        title="Create a Pitch Deck in 5 Minutes: Complete Guide",
        excerpt=(
            "Learn how to create a professional investor pitch deck in just 5 minutes. "
            "Includes tips, best practices, and a checklist."
        ),
        content=(
            "# Create a Pitch Deck in 5 Minutes\n\n"
            "Describe the company, the problem and the traction, review the strawman, then "
            "refine individual slides before exporting to PPTX or PDF.\n"
        ),
        category="tutorials",
        author=ArticleAuthor(name="Sarah Chen", role="Content Lead"),
        published_at=date(2025, 1, 15),
        read_time=8,
        tags=["pitch-deck", "startup", "tutorial", "fundraising"],
        cover_image="/blog/pitch-deck-guide.jpg",
    ),
    Article(
        id="understanding-ai-agents",
        title="Understanding Your AI Team: Director, Scripter, Graphic Artist, Data Viz",
        excerpt=(
            "A deep dive into each of the four AI agents, their roles, capabilities, and how "
            "they collaborate."
        ),
        content=(
            "# Understanding Your AI Team\n\n"
            "Each agent owns one concern of the deck. Knowing which one to address makes "
            "refinement requests faster to resolve.\n"
        ),
        category="ai-insights",
        author=ArticleAuthor(name="Michael Torres", role="AI Product Manager"),
        published_at=date(2025, 1, 12),
        read_time=10,
        featured=True,
        tags=["ai-agents", "director", "scripter", "graphic-artist", "data-visualizer"],
        cover_image="/blog/ai-agents-explained.jpg",
    ),
    Article(
        id="best-practices-ai-presentations",
        title="Best Practices for AI-Generated Presentations",
        excerpt=(
            "Learn how to get the best results from AI presentation tools: prompting tips, "
            "editing strategies, and common pitfalls."
        ),
        content=(
            "# Best Practices for AI-Generated Presentations\n\n"
            "State the audience and the goal up front, attach source documents, and edit "
            "the strawman before asking for the final deck.\n"
        ),
        category="best-practices",
        author=ArticleAuthor(name="Emma Rodriguez", role="Customer Success"),
        published_at=date(2025, 1, 10),
        read_time=9,
        tags=["best-practices", "tips", "prompting", "ai-guidance"],
        cover_image="/blog/best-practices.jpg",
    ),
    Article(
        id="chain-of-thought-transparency",
        title="The Science Behind Chain-of-Thought Presentations",
        excerpt="Explore how Chain-of-Thought reasoning makes AI more transparent in presentation creation.",
        content=(
            "# The Science Behind Chain-of-Thought Presentations\n\n"
            "Showing each agent's reasoning step lets you correct the plan before any slide "
            "is generated.\n"
        ),
        category="ai-insights",
        author=ArticleAuthor(name="Dr. Alex Kim", role="AI Research Lead"),
        published_at=date(2025, 1, 8),
        read_time=7,
        tags=["chain-of-thought", "ai", "transparency", "research"],
        cover_image="/blog/chain-of-thought.jpg",
    ),
]


TEMPLATES = [
    Template(
        id="investor-pitch-deck",
        title="Investor Pitch Deck",
        description="Problem, solution, market, traction and ask in a classic fundraising structure.",
        category="startup",
        complexity="intermediate",
        slide_count=12,
        thumbnail="/templates/investor-pitch.png",
        agents=["director", "scripter", "graphic-artist", "data-visualizer"],
        featured=True,
        popular=True,
        tags=["fundraising", "pitch", "investors"],
        created_at=date(2024, 11, 4),
    ),
    Template(
        id="quarterly-business-review",
        title="Quarterly Business Review",
        description="KPI dashboards, wins and misses, and next-quarter priorities for leadership reviews.",
        category="business",
        complexity="advanced",
        slide_count=18,
        thumbnail="/templates/qbr.png",
        agents=["director", "scripter", "data-visualizer"],
        popular=True,
        tags=["kpi", "review", "reporting"],
        created_at=date(2024, 10, 14),
    ),
    Template(
        id="sales-proposal",
        title="Sales Proposal",
        description="Customer pain points, proposed solution, pricing and next steps.",
        category="sales",
        complexity="basic",
        slide_count=8,
        thumbnail="/templates/sales-proposal.png",
        agents=["director", "scripter", "graphic-artist"],
        featured=True,
        tags=["proposal", "pricing", "customer"],
        created_at=date(2024, 12, 2),
    ),
    Template(
        id="product-launch",
        title="Product Launch",
        description="Positioning, audience, channel plan and launch timeline for a new product.",
        category="marketing",
        complexity="intermediate",
        slide_count=14,
        thumbnail="/templates/product-launch.png",
        agents=["director", "scripter", "graphic-artist"],
        new=True,
        tags=["launch", "go-to-market", "positioning"],
        created_at=date(2025, 1, 16),
    ),
    Template(
        id="course-lecture",
        title="Course Lecture",
        description="Learning objectives, worked examples and a recap for classroom teaching.",
        category="education",
        complexity="basic",
        slide_count=10,
        thumbnail="/templates/course-lecture.png",
        agents=["director", "scripter"],
        tags=["teaching", "lecture", "classroom"],
        created_at=date(2024, 9, 30),
    ),
    Template(
        id="brand-story",
        title="Brand Story",
        description="Mission, visual identity and customer journey told as a narrative.",
        category="creative",
        complexity="advanced",
        slide_count=16,
        thumbnail="/templates/brand-story.png",
        agents=["director", "scripter", "graphic-artist"],
        new=True,
        tags=["branding", "storytelling", "identity"],
        created_at=date(2025, 1, 9),
    ),
    Template(
        id="market-analysis",
        title="Market Analysis",
        description="Market sizing, competitor landscape and segment charts.",
        category="marketing",
        complexity="advanced",
        slide_count=15,
        thumbnail="/templates/market-analysis.png",
        agents=["director", "data-visualizer"],
        popular=True,
        tags=["market", "competitors", "tam"],
        created_at=date(2024, 11, 20),
    ),
]


INTEGRATIONS = [
    Integration(
        id="powerpoint",
        name="PowerPoint Export",
        description="Download any deck as an editable .pptx file.",
        category="export",
        status="available",
        logo="/integrations/powerpoint.svg",
        features=["Editable slides", "Speaker notes", "Native charts"],
        setup_difficulty="easy",
        popular=True,
    ),
    Integration(
        id="pdf",
        name="PDF Export",
        description="Share a print-ready PDF of the final presentation.",
        category="export",
        status="available",
        logo="/integrations/pdf.svg",
        features=["Print quality", "Hyperlinks preserved"],
        setup_difficulty="easy",
        popular=True,
    ),
    Integration(
        id="google-slides",
        name="Google Slides",
        description="Send finished decks straight to Google Slides.",
        category="export",
        status="beta",
        logo="/integrations/google-slides.svg",
        features=["One-click export", "Shared drive support"],
        setup_difficulty="moderate",
    ),
    Integration(
        id="google-drive",
        name="Google Drive",
        description="Attach source documents from Drive when starting a deck.",
        category="storage",
        status="coming-soon",
        logo="/integrations/google-drive.svg",
        features=["File picker", "Automatic sync"],
        setup_difficulty="easy",
    ),
    Integration(
        id="dropbox",
        name="Dropbox",
        description="Pull reference files from Dropbox folders.",
        category="storage",
        status="coming-soon",
        logo="/integrations/dropbox.svg",
        features=["File picker", "Team folders"],
        setup_difficulty="easy",
    ),
    Integration(
        id="slack",
        name="Slack",
        description="Share decks and review comments in Slack channels.",
        category="communication",
        status="beta",
        logo="/integrations/slack.svg",
        features=["Share links", "Review notifications"],
        setup_difficulty="moderate",
        popular=True,
    ),
    Integration(
        id="unsplash",
        name="Unsplash",
        description="Search royalty-free photography for slide backgrounds.",
        category="content",
        status="available",
        logo="/integrations/unsplash.svg",
        features=["Photo search", "Attribution handling"],
        setup_difficulty="easy",
    ),
    Integration(
        id="notion",
        name="Notion",
        description="Turn Notion pages into presentation outlines.",
        category="productivity",
        status="coming-soon",
        logo="/integrations/notion.svg",
        features=["Page import", "Outline extraction"],
        setup_difficulty="advanced",
        documentation="https://developers.notion.com",
    ),
]
