"""
Catalog Component Routes
Storefront product listing, product page and customer reviews
"""
from flask import Blueprint, current_app, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import ReviewForm, form_data, validate_form
from opticare.core.session import login_required
from .service import CatalogFilters, ProductService, ReviewService

catalog_bp = Blueprint('catalog', __name__, url_prefix='/products')

# Service instances
products = ProductService()
reviews = ReviewService()


@catalog_bp.route('', methods=['GET'])
def product_list():
    """Filterable, server-paginated product grid"""
    filters = CatalogFilters.from_args(request.args)
    per_page = current_app.config.get('PRODUCTS_PER_PAGE', OptiCareConfig.PRODUCTS_PER_PAGE)

    try:
        page = products.get_products(filters.to_params(per_page))
    except ApiError:
        error_toast('Failed to load products',
                    fallback='There was an error fetching the eyeframes. Please try again later.')
        page = {'content': [], 'totalPages': 0, 'totalElements': 0}

    return render_template(
        'catalog/product_list.html',
        filters=filters,
        page=page,
    )


@catalog_bp.route('/allItems', methods=['GET'])
def legacy_product_list():
    return redirect(url_for('catalog.product_list', **request.args.to_dict(flat=False)))


def _render_product(product_id, status=200, values=None, errors=None):
    try:
        product = products.get_product(product_id)
    except ApiError as e:
        if e.is_not_found:
            return render_template('errors/404.html'), 404
        error_toast('Failed to load product', e, 'Please try again later.')
        return redirect(url_for('catalog.product_list'))

    try:
        product_reviews = reviews.get_reviews_for_product(product_id)
    except ApiError:
        error_toast('Could not load reviews')
        product_reviews = []

    return render_template(
        'catalog/product_detail.html',
        product=product,
        reviews=product_reviews,
        values=values or {},
        errors=errors or {},
    ), status


@catalog_bp.route('/<product_id>', methods=['GET'])
def product_detail(product_id):
    return _render_product(product_id)


@catalog_bp.route('/<product_id>/reviews', methods=['POST'])
@login_required
def add_review(product_id):
    values = form_data(request.form)
    form, errors = validate_form(ReviewForm, values)
    if errors:
        return _render_product(product_id, 400, values, errors)

    try:
        reviews.add_review(product_id, form.rating, form.comment)
    except ApiError as e:
        error_toast('Submission failed', e, 'review already submitted for this product.')
        return _render_product(product_id, 400, values)

    toast('Review added!')
    return redirect(url_for('catalog.product_detail', product_id=product_id))


@catalog_bp.route('/<product_id>/reviews/<review_id>/delete', methods=['POST'])
@login_required
def delete_review(product_id, review_id):
    try:
        reviews.delete_review(review_id)
        toast('Review deleted')
    except ApiError as e:
        error_toast('Deletion failed', e, 'Try again later.')
    return redirect(url_for('catalog.product_detail', product_id=product_id))


def init_catalog(app):
    """Initialize catalog component with Flask app"""
    app.register_blueprint(catalog_bp)
    return catalog_bp
