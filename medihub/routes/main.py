from flask import Blueprint, jsonify

from medihub import auth
from medihub.identity import Role

main = Blueprint('main', __name__)


@main.after_app_request
def apply_cache_headers(response):
    # Authenticated responses must not be served from the browser cache after logout.
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
    response.headers['Pragma'] = 'no-cache'
    response.headers['Expires'] = '0'
    return response


@main.route('/')
def landing():
    role, _principal = auth.current_principal()
    body = {'message': 'MediHub API', 'roles': [item.value for item in Role]}
    if role is not None:
        body['redirect'] = auth.home_page(role)
    return jsonify(body)


@main.route('/logout', methods=['GET', 'POST'])
def logout():
    role, _principal = auth.current_principal()
    auth.logout()
    redirect_role = role or Role.PATIENT
    return jsonify({'message': 'Logout successful', 'redirect': auth.login_form(redirect_role)})
