"""
Flask JSON API for the syllabus planner.

Thin HTTP wrapper around the pipeline. It provides:
- /api/parse: text -> draft tasks ready for bulk create
- /api/wizard/preview: text or uploaded .txt -> review-only preview
- /api/courses/scale: task/session snapshot -> per-course estimate scale

Nothing here is stored; the caller persists whatever it accepts.
"""

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from .config import PlannerSettings, load_course_profiles
from .course_matching import normalize
from .errors import ConfigurationError, PlannerError
from .learner import compute_course_scale
from .models import preview_to_dict, session_from_dict, task_draft_to_dict, task_from_dict
from .wizard import build_preview, parse_syllabus

MAX_FILE_SIZE = 16 * 1024 * 1024  # 16MB
MAX_PREVIEW_LINES = 300

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = MAX_FILE_SIZE
app.config['PLANNER_SETTINGS'] = PlannerSettings.from_env()


def _settings(payload: Dict[str, Any]) -> PlannerSettings:
    settings = app.config['PLANNER_SETTINGS']
    mpp = payload.get('minutesPerPage')
    if isinstance(mpp, (int, float)) and mpp > 0:
        settings = replace(settings, baseline_mpp=float(mpp))
    return settings


def _pipeline_kwargs(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Optional pipeline arguments shared by parse and preview."""
    kwargs: Dict[str, Any] = {'settings': _settings(payload)}
    if payload.get('year'):
        kwargs['reference_year'] = _int_field(payload, 'year')
    if payload.get('semesterStart'):
        try:
            kwargs['semester_start'] = date.fromisoformat(payload['semesterStart'])
        except ValueError:
            raise ConfigurationError(f"semesterStart must be YYYY-MM-DD, got {payload['semesterStart']!r}")
    if isinstance(payload.get('courseMpp'), dict):
        kwargs['profiles'] = load_course_profiles(payload['courseMpp'])
    return kwargs


def _int_field(payload: Dict[str, Any], name: str) -> int:
    try:
        return int(payload[name])
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a whole number, got {payload[name]!r}")


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


@app.route('/api/parse', methods=['POST'])
def parse():
    """Parse syllabus text into draft tasks.

    Body: {"text": str, "course"?: str, "timezone"?: str, "year"?: int,
    "semesterStart"?: "YYYY-MM-DD", "minutesPerPage"?: number,
    "courseMpp"?: {course: {...}}}
    """
    payload = request.get_json(silent=True)
    if not payload or not isinstance(payload.get('text'), str):
        return jsonify(error='Missing text'), 400

    tasks = parse_syllabus(
        payload['text'],
        course=_optional_str(payload.get('course')),
        timezone=_optional_str(payload.get('timezone')),
        **_pipeline_kwargs(payload),
    )
    return jsonify(tasks=[task_draft_to_dict(t) for t in tasks])


@app.route('/api/wizard/preview', methods=['POST'])
def wizard_preview():
    """Build a review-only preview from text or an uploaded .txt file.

    Accepts JSON with the same fields as /api/parse, or a form with a
    'file' (plain text) plus optional 'course' and 'timezone' fields.
    PDF and DOCX text must be extracted before calling this endpoint.
    """
    if request.files:
        upload = request.files.get('file')
        if upload is None or not upload.filename:
            return jsonify(error='file is required'), 400
        if not upload.filename.lower().endswith('.txt') and 'text' not in (upload.mimetype or ''):
            return jsonify(error='Only extracted plain text is accepted'), 400
        text = upload.read().decode('utf-8', errors='replace')
        payload: Dict[str, Any] = request.form.to_dict()
    else:
        payload = request.get_json(silent=True) or {}
        text = payload.get('text')
        if not isinstance(text, str):
            return jsonify(error='Missing text'), 400

    preview = build_preview(
        text,
        course=_optional_str(payload.get('course')),
        timezone=_optional_str(payload.get('timezone')),
        **_pipeline_kwargs(payload),
    )
    lines = [ln.strip() for ln in text.splitlines()[:MAX_PREVIEW_LINES]]
    return jsonify(preview=preview_to_dict(preview), lines=lines)


@app.route('/api/courses/scale', methods=['POST'])
def course_scale():
    """Per-course estimate scale from logged vs estimated minutes.

    Body: {"tasks": [...], "sessions": [...], "course"?: str,
    "windowDays"?: int}. With "course", only that course is returned
    (scale 1.0 when nothing is known about it).
    """
    payload = request.get_json(silent=True) or {}
    try:
        tasks = [task_from_dict(t) for t in payload.get('tasks', [])]
        sessions = [session_from_dict(s) for s in payload.get('sessions', [])]
    except (KeyError, TypeError, ValueError) as e:
        return jsonify(error=f'Invalid snapshot: {e}'), 400

    window_days = app.config['PLANNER_SETTINGS'].window_days
    if payload.get('windowDays'):
        window_days = _int_field(payload, 'windowDays')
    scales = compute_course_scale(tasks, sessions, window_days=window_days)

    course = _optional_str(payload.get('course'))
    if course:
        key = normalize(course)
        return jsonify(course=key, estScale=scales.get(key, 1.0))
    return jsonify(courses=[{'course': k, 'estScale': v} for k, v in scales.items()])


@app.errorhandler(PlannerError)
def planner_error(error):
    """Handle pipeline errors (empty document, bad settings)."""
    return jsonify(error=f'{type(error).__name__}: {error}'), 400


@app.errorhandler(RequestEntityTooLarge)
def too_large(error):
    return jsonify(error='File too large. Maximum size is 16MB.'), 413


if __name__ == '__main__':
    # Run development server
    app.run(debug=True, host='0.0.0.0', port=5000)
