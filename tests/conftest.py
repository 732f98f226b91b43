"""
Pytest configuration and shared fixtures for all patmatch tests.

The pattern notation parser loads its lark grammar once, so it is shared
across the whole session; patterns and parsers hold no per-call state.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from patmatch.frontend.parser import PatternParser


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def pattern_parser():
    """
    Session-scoped notation parser shared across ALL tests.

    - Grammar is loaded once with lark native caching
    - Safe to share: every parse gets a fresh transformer
    """
    return PatternParser()


@pytest.fixture(scope="session")
def compile_pattern(pattern_parser):
    """Factory fixture: compile notation with an optional environment."""
    def _compile(source: str, **env):
        return pattern_parser.parse(source, env)
    return _compile


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: end-to-end parsing of realistic inputs"
    )
    config.addinivalue_line(
        "markers", "frontend: tests that compile pattern notation"
    )
