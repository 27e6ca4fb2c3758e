"""
ERP Assistant - Conversational Transaction Drafting

Turns free-form requests ("sold 10 widgets to Acme on credit") into
structured, double-entry-ready accounting drafts, asking one follow-up
question at a time until the draft is complete.

DESIGN PRINCIPLES:
1. The rule-based path is the source of truth; the LLM only proposes
2. Exactly one pending draft per session, asked one field at a time
3. The engine drafts, it never posts
4. Every turn is auditable
5. Every code path returns a well-formed Draft
"""

__version__ = "1.0.0"
__author__ = "ERP Assistant Team"
