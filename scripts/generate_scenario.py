"""
Scenario generation endpoint.

POST /generate-scenario with the current game state; returns a scenario and
three decisions generated by OpenAI from survival handbook reference text.
Every step runs once, in order, with no retry: a failure in any of them ends
the request with a JSON error.

Run locally:
    SUPABASE_URL=... SUPABASE_SERVICE_ROLE_KEY=... python scripts/generate_scenario.py
"""

import json
import re

import openai
import requests
from flask import Flask, jsonify, request
from openai import OpenAI

from config import (
    OPENAI_MODEL,
    PRINCIPLES_FILE,
    REQUEST_TIMEOUT,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
    log,
)
from corpus_common import PipelineError
from survival_principles import PrincipleLibrary

app = Flask(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

METRIC_NAMES = ("health", "hunger", "thirst", "energy", "morale", "warmth")
MAX_REFERENCE_CHARS = 8000
TEMPERATURE = 0.8

FALLBACK_SURVIVAL_GUIDE = """
Basic Wilderness Survival Principles:

1. Priorities of Survival (Rule of Threes):
   - 3 minutes without air
   - 3 hours without shelter (in harsh conditions)
   - 3 days without water
   - 3 weeks without food

2. Shelter:
   - Protection from elements is critical
   - Build in safe location away from hazards
   - Insulate from ground
   - Consider wind direction and water drainage

3. Water:
   - Find clean water sources
   - Purify before drinking (boiling, filtering)
   - Collect rainwater or dew
   - Avoid drinking unpurified water

4. Fire:
   - Provides warmth, cooking, water purification, and morale
   - Gather tinder, kindling, and fuel wood
   - Protect from wind and rain
   - Never leave unattended

5. Food:
   - Low priority initially
   - Know edible plants in your area
   - Fishing and trapping require less energy than hunting
   - Universal edibility test for unknown plants

6. Signaling:
   - Three of anything is universal distress signal
   - Use fire, mirrors, bright materials
   - Create visible ground signals

7. Mental Attitude:
   - Stay positive and focused
   - STOP: Sit, Think, Observe, Plan
   - Panic is your worst enemy
   - Small successes build confidence
"""

SYSTEM_PROMPT = "You are a survival scenario generator. Always respond with valid JSON only, no markdown formatting."

PROMPT_TEMPLATE = """You are a survival scenario generator for a wilderness survival game. \
Use the following survival guide content to create realistic scenarios:

{reference}

Current game state:
- Day: {day}
{metrics}
{previous}
Generate a survival scenario with 3 decision options based on the survival guide. \
Each decision should have realistic impacts on the metrics.

IMPORTANT: When describing scenarios and decisions:
- The player knows their own body status (energy, hunger, thirst, warmth, morale)
- Unknown factors must be EXTERNAL (weather changes, animal behavior, terrain hazards, resource availability) \
or INTERNAL INJURIES not yet discovered
- Never describe the player's own energy reserves or basic body status as "unknown"
- Focus on environmental uncertainties and hidden dangers

Respond with valid JSON only (no markdown):
{{
  "scenario": {{
    "title": "Brief title",
    "description": "Detailed scenario description based on survival guide principles",
    "environment": "forest" | "mountain" | "desert" | "tundra",
    "timeOfDay": "morning" | "afternoon" | "evening" | "night",
    "weather": "clear" | "rain" | "storm" | "snow" | "fog"
  }},
  "decisions": [
    {{
      "id": "decision_1",
      "text": "Decision option text",
      "reasoning": "Why this choice based on survival guide",
      "metrics": {{
        "health": 0,
        "hunger": -5,
        "thirst": -3,
        "energy": -10,
        "morale": 5,
        "warmth": 0
      }},
      "risk": "low" | "medium" | "high"
    }}
  ],
  "briefing": "Post-decision briefing explaining what happened and survival lessons learned"
}}"""

CODE_FENCE_RE = re.compile(r"```(?:json)?\n?")


class BadRequest(ValueError):
    pass


def error_response(message: str, status: int, details: str = None):
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def parse_game_state(payload):
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")

    day = payload.get("currentDay")
    if not isinstance(day, int) or isinstance(day, bool):
        raise BadRequest("currentDay must be an integer")

    metrics = payload.get("currentMetrics")
    if not isinstance(metrics, dict):
        raise BadRequest("currentMetrics must be an object")
    missing = [name for name in METRIC_NAMES if not isinstance(metrics.get(name), (int, float))]
    if missing:
        raise BadRequest(f"currentMetrics is missing: {', '.join(missing)}")

    previous = payload.get("previousDecisions") or []
    if not isinstance(previous, list):
        raise BadRequest("previousDecisions must be a list")

    return day, metrics, [str(p) for p in previous]


def _supabase_headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
    }


def fetch_openai_api_key():
    """Look up the OpenAI key in the game_settings table. Returns None if unset."""
    r = requests.get(
        f"{SUPABASE_URL}/rest/v1/game_settings",
        params={"select": "setting_value", "setting_key": "eq.openai_api_key", "limit": 1},
        headers=_supabase_headers(),
        timeout=REQUEST_TIMEOUT,
    )
    r.raise_for_status()
    rows = r.json()
    if not rows:
        return None
    return rows[0].get("setting_value") or None


def fetch_guide_text():
    """Fetch extracted handbook text from the extract-pdf-content function. Empty on failure."""
    try:
        r = requests.get(
            f"{SUPABASE_URL}/functions/v1/extract-pdf-content",
            headers={"Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}"},
            timeout=REQUEST_TIMEOUT,
        )
        if not r.ok:
            log.warning("PDF extraction returned HTTP %d", r.status_code)
            return ""
        data = r.json()
        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str):
            log.warning("PDF extraction returned no text field")
            return ""
        return text
    except (requests.RequestException, ValueError) as exc:
        log.warning("PDF extraction failed: %s", exc)
        return ""


def load_reference_text():
    """Handbook text if the fetch works, else the cleaned knowledge base, else the built-in guide."""
    text = fetch_guide_text()
    if text:
        return text

    try:
        text = PrincipleLibrary.load(PRINCIPLES_FILE).reference_text()
    except PipelineError as exc:
        log.warning("Knowledge base unavailable (%s), using default survival knowledge", exc)
        return FALLBACK_SURVIVAL_GUIDE

    if not text:
        log.info("Knowledge base is empty, using default survival knowledge")
        return FALLBACK_SURVIVAL_GUIDE
    return text


def build_prompt(reference, day, metrics, previous_decisions=None):
    metric_lines = "\n".join(f"- {name.capitalize()}: {metrics[name]}%" for name in METRIC_NAMES)
    previous = f"- Previous decisions: {', '.join(previous_decisions)}\n" if previous_decisions else ""
    return PROMPT_TEMPLATE.format(
        reference=reference[:MAX_REFERENCE_CHARS],
        day=day,
        metrics=metric_lines,
        previous=previous,
    )


def call_openai(api_key, prompt):
    client = OpenAI(api_key=api_key)
    response = client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=TEMPERATURE,
    )
    return response.choices[0].message.content or ""


def parse_scenario(content):
    """Strip markdown code fences the model sometimes adds, then parse JSON."""
    return json.loads(CODE_FENCE_RE.sub("", content).strip())


@app.after_request
def add_cors_headers(response):
    response.headers.update(CORS_HEADERS)
    return response


@app.route("/generate-scenario", methods=["POST", "OPTIONS"])
def generate_scenario():
    if request.method == "OPTIONS":
        return "", 200

    try:
        day, metrics, previous = parse_game_state(request.get_json(silent=True))
    except BadRequest as exc:
        return error_response(str(exc), 400)

    try:
        api_key = fetch_openai_api_key()
    except (requests.RequestException, ValueError) as exc:
        log.error("Settings lookup failed: %s", exc)
        api_key = None
    if not api_key:
        return error_response("OpenAI API key not configured in database settings.", 500)

    prompt = build_prompt(load_reference_text(), day, metrics, previous)

    try:
        content = call_openai(api_key, prompt)
    except openai.OpenAIError as exc:
        log.error("OpenAI request failed: %s", exc)
        return error_response("OpenAI API error", 500, str(exc))

    try:
        scenario = parse_scenario(content)
    except json.JSONDecodeError as exc:
        log.error("OpenAI returned non-JSON content: %s", exc)
        return error_response("Generated scenario is not valid JSON", 500, str(exc))

    return jsonify(scenario)


if __name__ == "__main__":
    app.run(debug=True)
