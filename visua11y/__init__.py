"""
Visua11y - accessibility summaries through a provider-fallback engine.

Turns selected text, whole pages and screenshots into plain-language
summaries by trying an on-device summarizer, then OpenAI, then Gemini.
"""

__version__ = "0.1.0"
