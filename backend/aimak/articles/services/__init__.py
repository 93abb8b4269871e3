# backend/aimak/articles/services/__init__.py
"""
AI advisors used by the articles module.

- prompt_builder.py: prompt text for every advisor
- categorization.py: pick one category slug for an article
- tagging.py: suggest tags, split into existing and new
- analysis.py: editorial critique with improved title/excerpt

Every advisor receives the shared AIGateway and raises AIServiceError
subclasses; nothing here touches the database.
"""
