"""
Review Moderation Component Routes
"""
from flask import Blueprint, redirect, render_template, request, url_for

from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import AdminReviewForm, form_data, validate_form
from opticare.core.session import admin_required
from .service import ReviewAdminService, search_reviews

admin_reviews_bp = Blueprint('admin_reviews', __name__, url_prefix='/admin/reviews')

# Service instance
service = ReviewAdminService()


def _render(editing=None, values=None, errors=None, status=200):
    q = request.values.get('q', '')
    try:
        reviews = service.get_all()
    except ApiError:
        error_toast('Failed to load reviews', fallback='Could not fetch review data. Please try again.')
        reviews = []
    return render_template(
        'admin_reviews/list.html',
        reviews=search_reviews(reviews, q),
        q=q,
        editing=editing,
        values=values or {},
        errors=errors or {},
    ), status


@admin_reviews_bp.route('', methods=['GET'])
@admin_required
def review_list():
    editing = request.args.get('edit')
    values = None
    if editing:
        try:
            review = service.get(editing) or {}
            values = {'rating': review.get('rating', ''), 'comment': review.get('comment', '')}
        except ApiError:
            error_toast('Failed to load review', fallback='Could not fetch the review.')
            editing = None
    return _render(editing, values)


@admin_reviews_bp.route('/<review_id>', methods=['POST'])
@admin_required
def update(review_id):
    values = form_data(request.form)
    form, errors = validate_form(AdminReviewForm, values)
    if errors:
        return _render(review_id, values, errors, 400)

    try:
        service.update(review_id, {'rating': form.rating, 'comment': form.comment})
    except ApiError as e:
        error_toast('Update Failed', e, 'An unexpected error occurred.')
        return _render(review_id, values, status=400)

    toast('Review Updated!', 'The review has been successfully updated.')
    return redirect(url_for('admin_reviews.review_list', q=request.form.get('q') or None))


@admin_reviews_bp.route('/<review_id>/delete', methods=['POST'])
@admin_required
def delete(review_id):
    try:
        service.delete(review_id)
        toast('Review Deleted', 'The review has been successfully deleted.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the review. Please try again.')
    return redirect(url_for('admin_reviews.review_list', q=request.form.get('q') or None))


def init_admin_reviews(app):
    """Initialize review moderation component with Flask app"""
    app.register_blueprint(admin_reviews_bp)
    return admin_reviews_bp
