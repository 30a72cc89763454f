from flask import current_app, g, jsonify

from medihub import auth, limiter
from medihub.errors import ValidationError
from medihub.identity import Role, clean_text, create_principal, profile_data, signup_fields, update_profile
from medihub.routes.common import get_payload


def _login_limit():
    return current_app.config['LOGIN_RATE_LIMIT']


def register_account_routes(blueprint, role: Role):
    """Attach the signup/login/profile routes every role shares."""

    @blueprint.route('/form')
    def form():
        extra = ['securityCode'] if auth.requires_security_code(role) else []
        return jsonify({
            'role': role.value,
            'signupFields': signup_fields(role) + extra,
            'loginFields': ['email', 'password'] + extra,
        })

    @blueprint.route('/signup', methods=['POST'])
    def signup():
        payload = get_payload()
        auth.check_security_code(role, payload.get('securityCode'))
        principal = create_principal(role, payload)
        return jsonify({
            'message': 'Signup successful',
            'id': principal.id,
            'redirect': auth.login_form(role),
        }), 201

    def login():
        payload = get_payload()
        auth.check_security_code(role, payload.get('securityCode'))
        email = clean_text(payload.get('email'), 'email')
        password = clean_text(payload.get('password'), 'password')
        if not email or not password:
            raise ValidationError('All fields are required', details='Missing email or password')

        auth.authenticate(role, email, password)
        return jsonify({'message': 'Login successful', 'redirect': auth.home_page(role)})

    # The limiter keys limits by function name; each role's view needs its own.
    login.__name__ = login.__qualname__ = f'{role.value}_login'
    blueprint.add_url_rule('/login', 'login', limiter.limit(_login_limit)(login), methods=['POST'])

    @blueprint.route('/logout', methods=['GET', 'POST'])
    def logout():
        auth.logout()
        return jsonify({'message': 'Logout successful', 'redirect': auth.login_form(role)})

    @blueprint.route('/profile')
    @auth.role_required(role, page=True)
    def profile():
        return jsonify({'title': f'{role.label} Profile', 'profile': profile_data(g.current_user)})

    @blueprint.route('/profile-data')
    @auth.role_required(role)
    def get_profile_data():
        return jsonify({'success': True, role.value: profile_data(g.current_user)})

    @blueprint.route('/update-profile', methods=['POST'])
    @auth.role_required(role)
    def post_update_profile():
        principal = update_profile(role, g.current_user.id, get_payload())
        return jsonify({
            'success': True,
            'message': 'Profile updated successfully',
            role.value: profile_data(principal),
            'redirect': f'/{role.value}/profile',
        })
