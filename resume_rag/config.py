"""Configuration loader for the résumé retrieval component."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Frozen into every index at build time. Changing it requires a rebuild.
DEFAULT_KEYWORDS: list[str] = [
    # Languages
    "csharp", "c#", "rust", "typescript", "javascript", "python", "php", "lua",
    # Frameworks & libraries
    "wpf", "xaml", "react", "reactjs", "nextjs", "next.js", "symfony", "express",
    "expressjs", "nodejs", "node.js", "bootstrap", "tailwind", "tauri",
    # Databases
    "sql", "nosql", "sqlite", "mongodb",
    # Tools
    "git", "docker", "unity", "lucene", "velocity", "vite", "json",
    # Architecture
    "fullstack", "full-stack", "frontend", "backend", "desktop", "web",
    "application", "multiplateforme", "cross-platform",
    # AI
    "rag", "intelligence", "artificielle", "ai", "ia", "groq",
    # Roles & domains
    "développeur", "developer", "logiciel", "software",
    "bibliothèque", "library", "framework", "api",
    # Education & experience
    "master", "bachelor", "université", "genève", "informatique", "science",
    "stage", "développement", "formation", "projet", "technologies",
    "sécurité", "vérification", "algorithmique", "base", "données",
    "réseaux", "modélisation",
    # Companies
    "bontaz", "gaea21", "coursera",
    # Projects
    "tailwindwpf", "portfoliorag", "importer", "updater",
    # General skills
    "créer", "création", "mise", "pratique", "accent",
    "concepts", "relatifs", "mobile", "systèmes", "communication",
    "nouvelles", "information",
    # Spoken languages
    "français", "anglais", "allemand", "courant", "professionnel", "notions",
]


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Résumé RAG"
    version: str = "1.0"
    language: str = "fr"


class ChunkingConfig(BaseModel):
    """Résumé chunking configuration."""

    min_chunk_chars: int = 6
    max_project_title_chars: int = 50


class EmbeddingConfig(BaseModel):
    """Keyword-frequency vectorizer configuration."""

    keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    chars_per_unit: int = 150
    primary_terms: list[str] = Field(
        default_factory=lambda: [
            "react", "reactjs", "typescript", "javascript", "csharp", "c#",
            "rust", "nextjs", "next.js", "wpf",
        ]
    )
    primary_boost: float = 1.3


class BoostConfig(BaseModel):
    """Rank-adjusting multipliers applied on top of cosine similarity."""

    section_multipliers: dict[str, float] = Field(
        default_factory=lambda: {
            "experience": 1.2,
            "experience_entry": 1.2,
            "skills": 1.15,
            "projects": 1.1,
            "project": 1.1,
            "education": 1.05,
            "education_entry": 1.05,
            "training": 1.0,
            "training_entry": 1.0,
            "profile": 1.0,
            "languages": 0.85,
            "contact": 0.8,
        }
    )
    exact_match_step: float = 0.1
    title_match_step: float = 0.15
    notable_terms: list[str] = Field(
        default_factory=lambda: ["javascript", "react", "nodejs", "python", "typescript"]
    )
    notable_step: float = 0.05
    min_word_length: int = 3


class RetrievalConfig(BaseModel):
    """Retrieval pipeline configuration."""

    top_k: int = 4
    min_similarity: float = 0.05
    max_context_chars: int = 1500
    preview_chars: int = 100
    order_context_by_section: bool = True
    section_priority: list[str] = Field(
        default_factory=lambda: [
            "profile", "experience", "projects", "skills",
            "education", "training", "languages",
        ]
    )
    expansion_top_k: int = 5
    max_query_variants: int = 3
    query_expansions: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "dev": ["développeur", "developer", "développement"],
            "js": ["javascript"],
            "ts": ["typescript"],
            "ai": ["intelligence artificielle", "ia"],
            "ml": ["machine learning", "apprentissage automatique"],
            "frontend": ["front-end", "interface utilisateur"],
            "backend": ["back-end", "serveur"],
            "fullstack": ["full-stack", "développeur complet"],
        }
    )


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    documents_dir: str = "./data/documents"
    index_path: str = "./data/processed/index.json"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    boosts: BoostConfig = Field(default_factory=BoostConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override storage paths from environment
    documents_dir = os.getenv("RESUME_RAG_DOCUMENTS_DIR")
    if documents_dir:
        config.storage.documents_dir = documents_dir
    index_path = os.getenv("RESUME_RAG_INDEX_PATH")
    if index_path:
        config.storage.index_path = index_path

    return config
