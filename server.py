"""HTTP server exposing Todoist projects as iCalendar feeds."""
import hmac
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, request

from config import Settings
from logging_setup import setup_logging
from processor.calendar_feed import CalendarFeed
from sources.todoist_client import TodoistClient, TodoistNotFoundError
from storage.calendar_cache import CalendarCache

logger = logging.getLogger(__name__)

CALENDAR_MIMETYPE = 'text/calendar'
VERIFICATION_HEADER = 'X-Todoist-Verification-Token'

INDEX_PAGE = """<!DOCTYPE html>
<html>
<head><title>Todoist Calendar Sync</title></head>
<body>
<h1>Todoist Calendar Sync</h1>
<p>Subscribe to <code>/calendar/&lt;project_id&gt;</code> in your calendar application
to see the due dates of a Todoist project as all-day events.</p>
<p>Point a Todoist webhook at <code>/webhook</code> to refresh feeds when tasks change.</p>
</body>
</html>
"""

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html>
<head><title>404 Not Found</title></head>
<body>
<h1>404 Not Found</h1>
<p>The requested page does not exist.</p>
</body>
</html>
"""


def _error_response(message: str, error: Exception, status: int):
    """
    Build a structured JSON error response.

    Args:
        message: Human readable summary of the failure
        error: Exception that caused the failure
        status: HTTP status code

    Returns:
        Tuple of JSON response and status code
    """
    return jsonify({
        'message': message,
        'error': str(error),
        'error_type': type(error).__name__
    }), status


def _webhook_project_id(payload: dict) -> Optional[str]:
    """Extract the project id from a flat or a Todoist-style webhook body."""
    project_id = payload.get('project_id')
    if project_id is None:
        event_data = payload.get('event_data')
        if isinstance(event_data, dict):
            project_id = event_data.get('project_id')
    return str(project_id) if project_id else None


def create_app(settings: Settings, feed: Optional[CalendarFeed] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        settings: Server settings
        feed: Calendar feed; built from settings when omitted

    Returns:
        Configured Flask app
    """
    if feed is None:
        feed = CalendarFeed(
            client=TodoistClient(
                api_token=settings.api_token or '',
                timeout=settings.timeout_seconds,
                base_url=settings.todoist_api_url
            ),
            cache=CalendarCache(ttl_seconds=settings.cache_ttl_seconds)
        )

    app = Flask(__name__)

    @app.before_request
    def require_api_token():
        """Fail every request while no API token is configured."""
        if not settings.api_token:
            logger.error("Todoist API token not configured")
            return jsonify({
                'message': 'Todoist API token not configured',
                'error': 'API_TOKEN is not set',
                'error_type': 'ConfigurationError'
            }), 500
        return None

    @app.route('/', methods=['GET'])
    def index():
        """Serve the informational page."""
        return Response(INDEX_PAGE, mimetype='text/html')

    @app.route('/health', methods=['GET'])
    def health():
        """Report liveness with the current time."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat()
        }), 200

    @app.route('/calendar/<project_id>', methods=['GET'])
    def calendar(project_id: str):
        """Serve the calendar feed of a project."""
        try:
            content = feed.get_calendar(project_id)
        except TodoistNotFoundError as e:
            logger.warning(
                f"Project {project_id} not found",
                extra={'project_id': project_id}
            )
            return _error_response('Project not found', e, 404)
        except Exception as e:
            logger.error(
                f"Error serving calendar for project {project_id}: {str(e)}",
                extra={'project_id': project_id, 'error_type': type(e).__name__},
                exc_info=True
            )
            return _error_response('Error generating calendar', e, 500)

        return Response(content, mimetype=CALENDAR_MIMETYPE)

    @app.route('/webhook', methods=['POST'])
    def webhook():
        """Invalidate the cached calendar of a project after a verified notification."""
        supplied = request.headers.get(VERIFICATION_HEADER, '')
        expected = settings.verification_token
        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            logger.warning("Rejected webhook with invalid verification token")
            return jsonify({'message': 'Invalid verification token'}), 403

        payload = request.get_json(silent=True) or {}
        project_id = _webhook_project_id(payload) if isinstance(payload, dict) else None
        if project_id:
            feed.invalidate(project_id)
        else:
            logger.info("Webhook payload carried no project id")

        return 'OK', 200

    @app.errorhandler(404)
    def not_found(error):
        """Serve the fixed 404 page for unmatched routes."""
        return Response(NOT_FOUND_PAGE, status=404, mimetype='text/html')

    return app


def main() -> None:
    """Run the calendar feed server."""
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    if not settings.api_token:
        logger.warning("API_TOKEN is not set; every request will fail")

    app = create_app(settings)
    logger.info(f"Server running at http://localhost:{settings.port}")
    app.run(host='0.0.0.0', port=settings.port)


if __name__ == '__main__':
    main()
