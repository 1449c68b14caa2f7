"""
Cart Component Routes
"""
from flask import Blueprint, redirect, render_template, request, url_for

from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import CallbackForm, form_data, validate_form
from opticare.core.session import current_user, is_logged_in, login_required, safe_redirect_target
from .service import CallbackService, CartService, cart_total

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')

# Service instances
service = CartService()
callbacks = CallbackService()


def _load_cart():
    if not is_logged_in():
        return None
    try:
        return service.get_cart()
    except ApiError as e:
        if not e.is_unauthorized:
            error_toast('Failed to load cart', e, 'Please try again later.')
        return None


def _render_cart(status=200, values=None, errors=None, show_callback=False):
    cart = _load_cart()
    user = current_user()
    callback_values = values or {'name': user['name'] if user else '', 'phone': '', 'address': ''}
    return render_template(
        'cart/cart.html',
        cart=cart,
        total=cart_total(cart),
        logged_in=is_logged_in(),
        callback_values=callback_values,
        errors=errors or {},
        show_callback=show_callback or bool(errors),
    ), status


@cart_bp.route('', methods=['GET'])
def cart_page():
    return _render_cart()


@cart_bp.route('/add', methods=['POST'])
def add_item():
    """Add a product card to the cart"""
    back = safe_redirect_target(request.form.get('next')) or url_for('catalog.product_list')
    if not is_logged_in():
        toast('Please login to add to cart', 'You must be logged in to add products to your cart.', 'destructive')
        return redirect(back)

    item = {
        'productId': request.form.get('productId'),
        'productName': request.form.get('productName'),
        'imageUrl': request.form.get('imageUrl'),
        'price': request.form.get('price', type=float),
    }
    try:
        service.add_to_cart(item)
        toast(f'{item["productName"]} added to cart!', f'Price: ₹{item["price"]}')
    except ApiError as e:
        error_toast('Failed to add to cart', e, 'Something went wrong.')
    return redirect(back)


@cart_bp.route('/items/<product_id>/quantity', methods=['POST'])
@login_required
def change_quantity(product_id):
    quantity = request.form.get('quantity', type=int)
    if quantity is None:
        return redirect(url_for('cart.cart_page'))

    try:
        service.change_quantity(product_id, quantity)
        if quantity < 1:
            toast('Item Removed', 'The item has been removed from your cart.')
    except ApiError:
        error_toast('Update Failed', fallback='Could not update item quantity.')
    return redirect(url_for('cart.cart_page'))


@cart_bp.route('/items/<product_id>/remove', methods=['POST'])
@login_required
def remove_item(product_id):
    try:
        service.remove_from_cart(product_id)
        toast('Item Removed', 'The item has been removed from your cart.')
    except ApiError:
        error_toast('Removal Failed', fallback='Could not remove the item.')
    return redirect(url_for('cart.cart_page'))


@cart_bp.route('/clear', methods=['POST'])
@login_required
def clear():
    try:
        service.clear_cart()
        toast('Cart Cleared', 'All items have been removed from your cart.')
    except ApiError as e:
        error_toast('Update Failed', e, 'Could not clear the cart.')
    return redirect(url_for('cart.cart_page'))


@cart_bp.route('/callback', methods=['POST'])
def request_callback():
    """Ask a sales representative to call back and confirm the order"""
    values = form_data(request.form)
    form, errors = validate_form(CallbackForm, values)
    if errors:
        return _render_cart(400, values, errors)

    try:
        callbacks.request_callback(form.name, form.phone, form.address)
    except ApiError:
        error_toast('Callback Failed', fallback='Could not submit your request. Please try again.')
        return _render_cart(400, values, show_callback=True)

    toast('Callback Requested! ✅', 'Our team will contact you shortly to confirm your order.')
    return redirect(url_for('cart.cart_page'))


def init_cart(app):
    """Initialize cart component with Flask app"""
    app.register_blueprint(cart_bp)
    return cart_bp
