"""
Product Administration Component Routes
"""
from flask import Blueprint, current_app, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import ProductForm, ProductUpdateForm, form_data, validate_form
from opticare.core.listing import paginate
from opticare.core.session import admin_required
from .service import ProductAdminService, product_values

admin_products_bp = Blueprint('admin_products', __name__, url_prefix='/admin/products')

# Service instance
service = ProductAdminService()


def _options():
    return {
        'categories': OptiCareConfig.PRODUCT_CATEGORIES,
        'specs_types': OptiCareConfig.SPECS_TYPES,
        'genders': OptiCareConfig.GENDERS,
    }


def _per_page():
    return current_app.config.get('ADMIN_PRODUCTS_PER_PAGE', OptiCareConfig.ADMIN_PRODUCTS_PER_PAGE)


@admin_products_bp.route('', methods=['GET'])
@admin_required
def landing():
    return render_template('admin_products/landing.html')


@admin_products_bp.route('/create', methods=['GET'])
@admin_required
def create_page():
    return render_template('admin_products/form.html', values=product_values(None), errors={},
                           product=None, **_options())


@admin_products_bp.route('/create', methods=['POST'])
@admin_required
def create():
    values = form_data(request.form)
    form, errors = validate_form(ProductForm, values)
    if errors:
        return render_template('admin_products/form.html', values=values, errors=errors, product=None,
                               **_options()), 400

    try:
        service.create(form)
    except ApiError as e:
        error_toast('Upload Failed', e, 'An unexpected error occurred.')
        return render_template('admin_products/form.html', values=values, errors={}, product=None,
                               **_options()), 400

    toast('Product Created!', f'{form.name} has been successfully added to your store.')
    return redirect(url_for('admin_products.create_page'))


@admin_products_bp.route('/manage', methods=['GET'])
@admin_required
def manage():
    q = request.args.get('q', '')
    try:
        products = service.list(q)
    except ApiError:
        error_toast('Failed to load products', fallback='Could not fetch product data.')
        products = []
    page = paginate(products, request.args.get('page', 1), _per_page())
    return render_template('admin_products/manage.html', page=page, q=q)


def _load_product(product_id):
    try:
        return service.get(product_id)
    except ApiError:
        error_toast('Failed to load products', fallback='Could not fetch product data.')
        return None


@admin_products_bp.route('/<product_id>/edit', methods=['GET'])
@admin_required
def edit_page(product_id):
    product = _load_product(product_id)
    if not product:
        return redirect(url_for('admin_products.manage'))
    return render_template('admin_products/form.html', values=product_values(product), errors={},
                           product=product, **_options())


@admin_products_bp.route('/<product_id>/edit', methods=['POST'])
@admin_required
def edit(product_id):
    product = _load_product(product_id)
    if not product:
        return redirect(url_for('admin_products.manage'))

    values = form_data(request.form)
    form, errors = validate_form(ProductUpdateForm, values)
    if errors:
        return render_template('admin_products/form.html', values=values, errors=errors, product=product,
                               **_options()), 400

    try:
        service.update(product, form)
    except ApiError as e:
        error_toast('Update Failed', e, 'An unexpected error occurred.')
        return render_template('admin_products/form.html', values=values, errors={}, product=product,
                               **_options()), 400

    toast('Product Updated!', f'{form.name} has been successfully updated.')
    return redirect(url_for('admin_products.manage'))


@admin_products_bp.route('/<product_id>/delete', methods=['POST'])
@admin_required
def delete(product_id):
    try:
        service.delete(product_id)
        toast('Product Deleted', 'The product has been successfully removed.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the product.')
    return redirect(url_for('admin_products.manage', q=request.form.get('q') or None,
                            page=request.form.get('page') or None))


def init_admin_products(app):
    """Initialize product administration component with Flask app"""
    app.register_blueprint(admin_products_bp)
    return admin_products_bp
