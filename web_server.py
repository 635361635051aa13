from flask import Flask, jsonify, request, render_template, session
import logging
import datetime
import os
import secrets
import sys

from age_report import DEFAULT_CATEGORY, build_report, default_birth_date, user_message
from errors import InvalidCategoryError, PetAgeError
from pet_calculator import SizeCategory
from preferences import SessionPreferenceStore

logger = logging.getLogger(__name__)

TEMPLATE_DIR_NAME = 'templates'


def find_template_folder(module_dir=None, prefix=None):
    """Templates beside this module in a checkout, else the installed data dir"""
    module_dir = module_dir or os.path.dirname(os.path.abspath(__file__))
    prefix = prefix or sys.prefix
    local = os.path.join(module_dir, TEMPLATE_DIR_NAME)
    if os.path.isdir(local):
        return local
    return os.path.join(prefix, 'share', 'dogage', TEMPLATE_DIR_NAME)


def create_app(store_factory=None, clock=None):
    """Create and configure Flask application

    store_factory builds the PreferenceStore for the current request and
    clock returns "now"; both are swappable for tests.
    """
    app = Flask(__name__, template_folder=find_template_folder())
    app.secret_key = os.getenv('SECRET_KEY')
    if not app.secret_key:
        logger.warning('SECRET_KEY not set, signing session cookies with a random per-process key')
        app.secret_key = secrets.token_hex(32)
    app.permanent_session_lifetime = datetime.timedelta(days=365)

    if store_factory is None:
        store_factory = lambda: SessionPreferenceStore(session)
    if clock is None:
        clock = datetime.datetime.now

    start_time = datetime.datetime.utcnow()

    def run_conversion(birth_value, category):
        """Build a report and remember the inputs; returns (report, error)"""
        try:
            report = build_report(birth_value, category, clock())
        except InvalidCategoryError as e:
            logger.error(f'Invalid size category submitted: {e}')
            return None, user_message(e)
        except PetAgeError as e:
            logger.warning(f'Rejected dog age input {birth_value!r}: {e}')
            return None, user_message(e)

        store_factory().save_preferences(report.birth_date.isoformat(), report.category.value)
        return report, None

    def render_page(birth_value, category, report=None, error=None):
        return render_template(
            'index.html',
            birthdate=birth_value,
            category=category,
            categories=list(SizeCategory),
            report=report,
            error=error,
        )

    @app.route('/', methods=['GET'])
    def home():
        """Show the form, computing once on a first visit"""
        stored_birthdate, stored_category = store_factory().load_preferences()
        category = stored_category or DEFAULT_CATEGORY.value

        if stored_birthdate is None:
            birth_value = default_birth_date(clock().date()).isoformat()
            report, error = run_conversion(birth_value, category)
            return render_page(birth_value, category, report, error)

        return render_page(stored_birthdate, category)

    @app.route('/', methods=['POST'])
    def submit():
        """Handle the calculate button"""
        birth_value = request.form.get('birthdate', '')
        category = request.form.get('weight-category', DEFAULT_CATEGORY.value)
        report, error = run_conversion(birth_value, category)
        return render_page(birth_value, category, report, error), (400 if error else 200)

    @app.route('/calculate', methods=['POST'])
    def calculate():
        """Convert a dog's age, JSON in and out"""
        data = request.get_json(silent=True) or {}
        report, error = run_conversion(data.get('birthdate'), data.get('category', DEFAULT_CATEGORY.value))
        if error:
            return jsonify({'error': error}), 400
        return jsonify(report.to_dict())

    @app.route('/health')
    def health_check():
        """Basic health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'service': 'Dog Age Calculator',
            'timestamp': datetime.datetime.utcnow().isoformat(),
            'uptime_seconds': (datetime.datetime.utcnow() - start_time).total_seconds()
        })

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors"""
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors"""
        logger.error(f'Internal server error: {error}')
        return jsonify({'error': 'Internal server error'}), 500

    @app.before_request
    def log_request():
        logger.info(f'Incoming request: {request.method} {request.path} from {request.remote_addr}')

    return app
