"""Prompt construction for grid-labeled images."""

from __future__ import annotations

from gridspot.grid.addressing import number_to_letters


LANGUAGE_NAMES = {
    "en": "English",
    "it": "Italian",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "pt": "Portuguese",
}


def language_name(code: str) -> str:
    """English name of a language code; unknown codes are returned unchanged."""
    c = str(code or "en").strip()
    return LANGUAGE_NAMES.get(c.lower(), c)


def build_prompt(
    *,
    objects: str,
    rows: int = 12,
    cols: int = 12,
    max_areas: int = 2,
    language: str = "en",
) -> str:
    """Instructions asking the model to answer with grid cells as strict JSON."""
    col_end = number_to_letters(int(cols))
    lang = language_name(language)
    code = str(language or "en").strip().lower()

    return f"""You are an expert in visual analysis and object detection.
The image contains a grid with columns A..{col_end} and rows 1..{int(rows)} (cells like A1, B7, A10).
OBJECTIVE: Identify, if present, AREAS OF INTEREST containing "{objects}" (described in {lang}).
An area can include ONE OR MORE CONTIGUOUS CELLS. Evaluate ONLY sharp areas; if you see human markings (yellow), prioritize them.
You must be as precise as possible in indicating the cells involved.

IMPORTANT: Provide all labels and explanations in {lang.upper()}.

RETURN ONLY valid JSON:

{{
  "areas": [
    {{
      "cells": ["B3","B4","C4"],
      "label": "object-class-in-{code}-language",
      "score": 0.0-1.0,
      "explanation": "Brief explanation in {lang} of what was found and why to check it, don't mention cells"
    }}
  ],
  "no_detections": false
}}

If you see no {objects} or the photo cannot be evaluated:
{{"areas": [], "no_detections": true, "reason": "short reason in {lang}"}}

Maximum {int(max_areas)} areas."""
