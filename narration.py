"""Capacity risk narration through Gemini."""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

import google.generativeai as genai

from models import ChartDataPoint
from settings import load_settings

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Gemini API Key is missing. Please check your environment configuration."
AUTH_ERROR_MESSAGE = "Authentication Error: Please check your API Key settings."
UNAVAILABLE_MESSAGE = "AI Analysis service is currently unavailable. Please try again later."


def build_prompt(series: Sequence[ChartDataPoint], product_line: str) -> str:
    data = [
        {
            "month": p.month,
            "actualCapacity": p.actual_capacity,
            "newOrders": p.demand,
            "backlogToClear": p.backlog,
            "totalRequired": p.total_requirement,
            "gap": p.actual_capacity - p.total_requirement,
            "theoreticalMax": p.theoretical_max,
        }
        for p in series
    ]
    return f"""
You are a Manufacturing Operations Manager. Analyze the following S&OP data for a discrete manufacturing plant.

Product Line: {product_line}

Data (Next 4 Months):
{json.dumps(data, indent=2)}

Task:
Identify the critical months where Total Requirement (Orders + Backlog) exceeds Actual Capacity.
Note that Actual Capacity may vary month-to-month based on user simulation.
Analyze if the pressure is coming from new orders or backlog.
Provide 3 concise, actionable recommendations to close the gap (e.g., increase shifts in specific months, prioritize backlog, or push out orders).
Keep the tone professional and executive-brief style. Max 100 words.
"""


def analyze_capacity_risks(
    series: Sequence[ChartDataPoint],
    product_line: str,
    api_key: Optional[str] = None,
    model_name: Optional[str] = None,
    temperature: Optional[float] = None,
) -> str:
    """Ask Gemini for a short risk summary; failures come back as a fixed advisory string."""
    settings = load_settings()
    api_key = api_key if api_key is not None else settings.gemini_api_key
    if not api_key:
        logger.warning("Skipping capacity narration: no Gemini API key configured")
        return MISSING_KEY_MESSAGE

    try:
        genai.configure(api_key=api_key)
        model = genai.GenerativeModel(model_name or settings.gemini_model)
        response = model.generate_content(
            build_prompt(series, product_line),
            generation_config={
                "temperature": settings.gemini_temperature if temperature is None else temperature
            },
        )
        text = response.text
    except Exception as exc:
        logger.exception("Gemini API error")
        if "401" in str(exc):
            return AUTH_ERROR_MESSAGE
        return UNAVAILABLE_MESSAGE

    return text or UNAVAILABLE_MESSAGE
