"""
Source pipeline configuration.

Defaults live in config/source_pipeline.yml; environment variables
(loaded from .env) override individual values:

    SEFARIA_BASE_URL          catalogue base URL
    SEFARIA_PROBE_TIMEOUT     seconds before a link probe counts as unreachable
    SOURCE_BATCH_CHUNK_SIZE   sources generated per chunk in bulk runs
    ORAYATA_DB                SQLite file for accepted sources
"""

import copy
import os
from functools import lru_cache
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv

# Load .env
load_dotenv()


CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    'config',
    'source_pipeline.yml'
)

DEFAULT_SETTINGS: Dict[str, Any] = {
    'catalogue': {
        'base_url': 'https://www.sefaria.org',
        'probe_timeout_seconds': 10,
    },
    'generation': {
        'chunk_size': 3,
        'max_count': 50,
        'min_duration_minutes': 5,
        'default_difficulty': 'beginner',
        'default_language': 'both',
    },
    'storage': {
        'db_path': 'orayata_sources.db',
    },
    'topic_aliases': {},
    'topic_relations': {},
    'subcategory_relations': {},
    'commentaries': {},
}


@lru_cache(maxsize=1)
def load_settings() -> Dict[str, Any]:
    """Load settings from YAML, layered over the defaults and under env overrides."""
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    if os.path.exists(CONFIG_PATH):
        with open(CONFIG_PATH, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(settings.get(section), dict):
                settings[section].update(values)
            else:
                settings[section] = values

    # ---- ENV OVERRIDES ----
    if os.getenv("SEFARIA_BASE_URL"):
        settings['catalogue']['base_url'] = os.getenv("SEFARIA_BASE_URL")
    if os.getenv("SEFARIA_PROBE_TIMEOUT"):
        settings['catalogue']['probe_timeout_seconds'] = float(os.getenv("SEFARIA_PROBE_TIMEOUT"))
    if os.getenv("SOURCE_BATCH_CHUNK_SIZE"):
        settings['generation']['chunk_size'] = int(os.getenv("SOURCE_BATCH_CHUNK_SIZE"))
    if os.getenv("ORAYATA_DB"):
        settings['storage']['db_path'] = os.getenv("ORAYATA_DB")

    return settings


def reload_settings() -> Dict[str, Any]:
    """Clear cache and reload settings."""
    load_settings.cache_clear()
    return load_settings()


def get_catalogue_settings() -> Dict[str, Any]:
    """Get Sefaria catalogue settings (base_url, probe_timeout_seconds)."""
    return load_settings()['catalogue']


def get_generation_settings() -> Dict[str, Any]:
    """Get generation settings (chunk_size, max_count, defaults)."""
    return load_settings()['generation']


def get_chunk_size() -> int:
    """Get the number of sources generated per bulk chunk."""
    return int(get_generation_settings().get('chunk_size', 3))


def get_db_path() -> str:
    """Get the SQLite path for accepted sources."""
    return load_settings()['storage']['db_path']


def get_topic_aliases() -> Dict[str, str]:
    """Get topic slug aliases (e.g. 'maimonides' -> 'rambam')."""
    return load_settings().get('topic_aliases') or {}


def get_topic_relations() -> Dict[str, List[str]]:
    """Get main topic -> related subtopics mapping."""
    return load_settings().get('topic_relations') or {}


def get_subcategory_relations() -> Dict[str, List[str]]:
    """Get subcategory -> related topics mapping."""
    return load_settings().get('subcategory_relations') or {}


def get_commentary_settings() -> Dict[str, Any]:
    """Get commentary selection tables (by_source_type, source_type_keywords, ...)."""
    return load_settings().get('commentaries') or {}
