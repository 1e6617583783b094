"""
Stack Overflow tag parser - turns popular tags into tech skill records.

Programming languages and generic or version-specific tags are skipped.
Category, niche, Portuguese name and color come from the lookup tables below,
matched on the lower-cased tag first and the normalized slug second.
"""
import re
import logging
from types import MappingProxyType
from typing import Iterable, List, Optional, Set, Tuple

from ..schemas.tech_skill import StackOverflowTag, ParsedSkill

logger = logging.getLogger(__name__)

# Tags whose symbols would be lost by plain slugification
SLUG_OVERRIDES = MappingProxyType({
    "c#": "csharp",
    "c++": "cpp",
    "f#": "fsharp",
    ".net": "dotnet",
    ".net-core": "dotnet-core",
    "asp.net": "aspnet",
    "asp.net-core": "aspnet-core",
    "asp.net-mvc": "aspnet-mvc",
    "node.js": "nodejs",
    "vue.js": "vuejs",
    "next.js": "nextjs",
    "d3.js": "d3js",
    "three.js": "threejs",
    "express.js": "expressjs",
})

DISPLAY_NAMES = MappingProxyType({
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "reactjs": "React",
    "node.js": "Node.js",
    "vue.js": "Vue.js",
    "next.js": "Next.js",
    "angular": "Angular",
    "jquery": "jQuery",
    "html": "HTML",
    "css": "CSS",
    "sql": "SQL",
    "mysql": "MySQL",
    "postgresql": "PostgreSQL",
    "mongodb": "MongoDB",
    "sql-server": "SQL Server",
    "graphql": "GraphQL",
    "json": "JSON",
    "xml": "XML",
    "rest": "REST",
    "api": "API",
    "aws": "AWS",
    "amazon-web-services": "Amazon Web Services",
    "gcp": "GCP",
    "ios": "iOS",
    "macos": "macOS",
    "github": "GitHub",
    "gitlab": "GitLab",
    "numpy": "NumPy",
    "tensorflow": "TensorFlow",
    "pytorch": "PyTorch",
    "scikit-learn": "scikit-learn",
    ".net": ".NET",
    "asp.net": "ASP.NET",
    "asp.net-core": "ASP.NET Core",
    "wordpress": "WordPress",
    "phpmyadmin": "phpMyAdmin",
    "devops": "DevOps",
})

PROGRAMMING_LANGUAGES = frozenset({
    "javascript", "typescript", "python", "java", "c#", "c++", "c", "php",
    "ruby", "go", "rust", "kotlin", "swift", "scala", "r", "dart", "perl",
    "haskell", "lua", "elixir", "clojure", "objective-c", "f#", "vba",
    "matlab", "groovy", "julia", "erlang", "fortran", "cobol", "assembly",
    "shell", "bash", "powershell",
})

GENERIC_TAGS = frozenset({
    "arrays", "string", "list", "dictionary", "loops", "for-loop",
    "if-statement", "function", "class", "object", "oop", "variables",
    "regex", "algorithm", "performance", "debugging", "sorting", "date",
    "datetime", "exception", "file", "image", "database", "forms",
    "validation", "multithreading", "recursion", "pointers", "windows",
    "linux", "android-studio", "visual-studio", "excel", "csv", "math",
    "unit-testing", "authentication", "security", "http", "ajax", "html5",
    "css3", "twitter-bootstrap", "dataframe", "selenium-webdriver",
})

# Tags ending in a version: python-3.x, angular-8, django-2.2
_VERSIONED_TAG = re.compile(r"-(\d+(\.\d+)*(\.x)?|\d*\.x)$")

SKILL_CATEGORIES = MappingProxyType({
    # Frontend
    "reactjs": ("FRAMEWORK", "frontend"),
    "angular": ("FRAMEWORK", "frontend"),
    "vue.js": ("FRAMEWORK", "frontend"),
    "next.js": ("FRAMEWORK", "frontend"),
    "svelte": ("FRAMEWORK", "frontend"),
    "jquery": ("LIBRARY", "frontend"),
    "html": ("OTHER", "frontend"),
    "css": ("OTHER", "frontend"),
    "sass": ("TOOL", "frontend"),
    "tailwind-css": ("FRAMEWORK", "frontend"),
    "webpack": ("TOOL", "frontend"),
    "redux": ("LIBRARY", "frontend"),
    # Backend
    "node.js": ("PLATFORM", "backend"),
    "django": ("FRAMEWORK", "backend"),
    "flask": ("FRAMEWORK", "backend"),
    "fastapi": ("FRAMEWORK", "backend"),
    "spring": ("FRAMEWORK", "backend"),
    "spring-boot": ("FRAMEWORK", "backend"),
    "laravel": ("FRAMEWORK", "backend"),
    "ruby-on-rails": ("FRAMEWORK", "backend"),
    "express": ("FRAMEWORK", "backend"),
    "asp.net": ("FRAMEWORK", "backend"),
    "asp.net-core": ("FRAMEWORK", "backend"),
    ".net": ("PLATFORM", "backend"),
    "graphql": ("OTHER", "backend"),
    "rest": ("OTHER", "backend"),
    # Mobile
    "android": ("PLATFORM", "mobile"),
    "ios": ("PLATFORM", "mobile"),
    "flutter": ("FRAMEWORK", "mobile"),
    "react-native": ("FRAMEWORK", "mobile"),
    "xamarin": ("FRAMEWORK", "mobile"),
    # Databases
    "sql": ("DATABASE", "data-engineering"),
    "mysql": ("DATABASE", "backend"),
    "postgresql": ("DATABASE", "backend"),
    "mongodb": ("DATABASE", "backend"),
    "sql-server": ("DATABASE", "backend"),
    "sqlite": ("DATABASE", "backend"),
    "oracle": ("DATABASE", "backend"),
    "redis": ("DATABASE", "backend"),
    "elasticsearch": ("DATABASE", "backend"),
    "firebase": ("PLATFORM", "backend"),
    # DevOps and cloud
    "docker": ("TOOL", "devops"),
    "kubernetes": ("TOOL", "devops"),
    "git": ("TOOL", "devops"),
    "jenkins": ("TOOL", "devops"),
    "terraform": ("TOOL", "devops"),
    "ansible": ("TOOL", "devops"),
    "nginx": ("TOOL", "devops"),
    "amazon-web-services": ("PLATFORM", "cloud"),
    "azure": ("PLATFORM", "cloud"),
    "google-cloud-platform": ("PLATFORM", "cloud"),
    "heroku": ("PLATFORM", "cloud"),
    # Data and machine learning
    "pandas": ("LIBRARY", "data-science"),
    "numpy": ("LIBRARY", "data-science"),
    "matplotlib": ("LIBRARY", "data-analytics"),
    "apache-spark": ("FRAMEWORK", "data-engineering"),
    "hadoop": ("FRAMEWORK", "data-engineering"),
    "tensorflow": ("FRAMEWORK", "machine-learning"),
    "pytorch": ("FRAMEWORK", "machine-learning"),
    "keras": ("LIBRARY", "machine-learning"),
    "scikit-learn": ("LIBRARY", "machine-learning"),
    "machine-learning": ("OTHER", "machine-learning"),
    "deep-learning": ("OTHER", "machine-learning"),
    # Testing
    "selenium": ("TOOL", "test-automation"),
    "jestjs": ("TOOL", "test-automation"),
    "cypress": ("TOOL", "test-automation"),
    "pytest": ("TOOL", "test-automation"),
    "junit": ("TOOL", "test-automation"),
    # Game development
    "unity-game-engine": ("PLATFORM", "game-dev"),
    "unreal-engine4": ("PLATFORM", "game-dev"),
    # Embedded
    "arduino": ("PLATFORM", "embedded"),
    "raspberry-pi": ("PLATFORM", "embedded"),
})

SKILL_TRANSLATIONS = MappingProxyType({
    "machine-learning": "Aprendizado de Máquina",
    "deep-learning": "Aprendizado Profundo",
    "computer-vision": "Visão Computacional",
    "web-scraping": "Raspagem de Dados Web",
    "data-structures": "Estruturas de Dados",
    "networking": "Redes",
    "web-services": "Serviços Web",
    "google-cloud-platform": "Google Cloud",
    "amazon-web-services": "Amazon Web Services",
    "unity-game-engine": "Unity",
    "neural-network": "Redes Neurais",
    "nlp": "Processamento de Linguagem Natural",
})

SKILL_COLORS = MappingProxyType({
    "reactjs": "#61DAFB",
    "angular": "#DD0031",
    "vue.js": "#4FC08D",
    "svelte": "#FF3E00",
    "node.js": "#339933",
    "django": "#092E20",
    "flask": "#000000",
    "fastapi": "#009688",
    "spring-boot": "#6DB33F",
    "laravel": "#FF2D20",
    "ruby-on-rails": "#CC0000",
    "flutter": "#02569B",
    "android": "#3DDC84",
    "mysql": "#4479A1",
    "postgresql": "#4169E1",
    "mongodb": "#47A248",
    "redis": "#DC382D",
    "docker": "#2496ED",
    "kubernetes": "#326CE5",
    "git": "#F05032",
    "amazon-web-services": "#FF9900",
    "azure": "#0078D4",
    "tensorflow": "#FF6F00",
    "pytorch": "#EE4C2C",
    "pandas": "#150458",
    "graphql": "#E10098",
})

SKILL_ALIASES = MappingProxyType({
    "reactjs": ["react", "react.js"],
    "vue.js": ["vue", "vuejs"],
    "node.js": ["node", "nodejs"],
    "next.js": ["next", "nextjs"],
    "amazon-web-services": ["aws"],
    "google-cloud-platform": ["gcp", "google cloud"],
    "kubernetes": ["k8s"],
    "postgresql": ["postgres", "psql"],
    "mongodb": ["mongo"],
    "sql-server": ["mssql"],
    "ruby-on-rails": ["rails", "ror"],
    "spring-boot": ["springboot"],
    "tensorflow": ["tf"],
    "scikit-learn": ["sklearn"],
    "asp.net-core": ["aspnet core"],
    ".net": ["dotnet"],
})


def normalize_slug(name: str) -> str:
    lowered = name.strip().lower()
    if lowered in SLUG_OVERRIDES:
        return SLUG_OVERRIDES[lowered]

    slug = lowered.replace("#", "sharp").replace("+", "p")
    slug = re.sub(r"^\.", "dot", slug)
    slug = slug.replace(".", "")
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def format_display_name(name: str) -> str:
    lowered = name.lower()
    if lowered in DISPLAY_NAMES:
        return DISPLAY_NAMES[lowered]
    # "reactjs" style suffixes read better with the dot back
    if lowered.endswith("js") and len(lowered) > 2 and "-" not in lowered:
        return f"{lowered[:-2].capitalize()}.js"
    return " ".join(part.capitalize() for part in lowered.split("-") if part)


def is_programming_language(name: str) -> bool:
    return name.lower() in PROGRAMMING_LANGUAGES


def should_skip_tag(name: str) -> bool:
    lowered = name.lower()
    return lowered in GENERIC_TAGS or bool(_VERSIONED_TAG.search(lowered))


def get_aliases(name: str) -> List[str]:
    return list(SKILL_ALIASES.get(name.lower(), []))


def get_keywords(name: str) -> List[str]:
    """Words of the tag itself, e.g. 'spring-boot' -> ['spring', 'boot']."""
    words = [word for word in re.split(r"[-.\s]+", name.lower()) if word]
    return list(dict.fromkeys(words))


def _lookup(table, tag_lower: str, slug: str):
    if tag_lower in table:
        return table[tag_lower]
    return table.get(slug)


def parse_tags(
    tags: Iterable[StackOverflowTag],
    seen_slugs: Optional[Set[str]] = None,
) -> Tuple[List[ParsedSkill], Set[str]]:
    """
    Parse tags into skills, keeping the first tag for each slug.

    Args:
        tags: Tags in popularity order
        seen_slugs: Slugs produced by an earlier call; these tags are skipped.
            Not mutated, the updated set is returned.

    Returns:
        (skills, seen_slugs including the slugs parsed here)
    """
    seen = set(seen_slugs) if seen_slugs else set()
    skills = []

    for tag in tags:
        slug = normalize_slug(tag.name)
        tag_lower = tag.name.lower()

        if not slug or slug in seen:
            continue
        if is_programming_language(tag.name) or should_skip_tag(tag.name):
            continue

        skill_type, niche_slug = _lookup(SKILL_CATEGORIES, tag_lower, slug) or ("OTHER", None)
        seen.add(slug)

        skills.append(ParsedSkill(
            slug=slug,
            name_en=format_display_name(tag.name),
            name_pt_br=_lookup(SKILL_TRANSLATIONS, tag_lower, slug) or format_display_name(tag.name),
            type=skill_type,
            niche_slug=niche_slug,
            color=_lookup(SKILL_COLORS, tag_lower, slug),
            aliases=get_aliases(tag.name),
            keywords=get_keywords(tag.name),
            popularity=tag.count,
        ))

    logger.info(f"[TECH-SKILLS] Parsed {len(skills)} skills from Stack Overflow tags")
    return skills, seen
