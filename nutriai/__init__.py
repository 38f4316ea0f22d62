"""NutriAI backend: meal analysis, voice assistant and progress tracking API."""

__version__ = "0.1.0"
