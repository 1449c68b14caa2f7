"""
Main page routes
"""
from datetime import datetime

from flask import Blueprint, jsonify, render_template

from opticare.config.settings import OptiCareConfig

# Create main blueprint
main_bp = Blueprint('main', __name__)

FEATURES = [
    ('Wide Selection', 'Eyeglasses and sunglasses for every face, style and budget.'),
    ('Expert Eye Tests', 'Computerised eye examinations by qualified optometrists.'),
    ('Doctor Consultations', 'Book a visit with our eye doctor in a few clicks.'),
    ('Pay on Delivery', 'Request a callback and pay when your glasses arrive.'),
]

STEPS = [
    ('Browse', 'Filter frames by category, gender, price and rating.'),
    ('Book', 'Reserve an eye test or a doctor appointment online.'),
    ('Order', 'Add frames to your cart and request a callback.'),
    ('Collect', 'Receive your glasses with the prescription from your test.'),
]


@main_bp.route('/')
def home():
    """Home page"""
    return render_template('main/home.html', features=FEATURES, steps=STEPS)


@main_bp.route('/eyetest')
def eye_test_info():
    """In-store eye test information"""
    return render_template('main/eyetest.html', store_location=OptiCareConfig.STORE_LOCATION)


@main_bp.route('/health')
def health():
    return jsonify({'status': 'ok', 'service': 'opticare-web', 'timestamp': datetime.now().isoformat()})
