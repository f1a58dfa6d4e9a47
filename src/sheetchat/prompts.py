"""Prompt templates wrapping the AI-context string.

These only build text.  Sending the prompt to a language model is the
caller's job.
"""

from __future__ import annotations

ANALYSIS_PROMPT_TEMPLATE = """\
You are an expert data analyst with access to a comprehensive Excel dataset. \
Here's the complete data structure and content:

{context}

IMPORTANT INSTRUCTIONS:
- You have full access to ALL sheets and ALL data in this Excel file
- Analyze the ENTIRE dataset to answer the user's question
- Provide specific insights, numbers, trends, and patterns
- Be comprehensive and detailed in your analysis
- Use the actual data values and structure shown above
- If the user asks about trends, patterns, or insights, examine all relevant data points
- Present findings in a clear, structured format with bullet points and sections
- Include relevant statistics, comparisons, and recommendations when applicable

User Question: {question}

Please provide a thorough analysis based on the complete dataset above."""

VOICE_PROMPT_TEMPLATE = """\
You are a background check data analyst assistant. \
Analyze this Excel dataset and answer the user's voice query:

{context}

User Query: {question}

Provide a clear, spoken-friendly response with specific insights. \
Keep it under {word_limit} words for voice delivery."""


def build_analysis_prompt(context: str, question: str) -> str:
    """Full-length analyst prompt used by the text chat front-end."""
    return ANALYSIS_PROMPT_TEMPLATE.format(context=context, question=question)


def build_voice_prompt(context: str, question: str, word_limit: int = 150) -> str:
    """Short-answer prompt used by the voice front-end."""
    return VOICE_PROMPT_TEMPLATE.format(
        context=context, question=question, word_limit=word_limit
    )
