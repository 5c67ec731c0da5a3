from flask import Blueprint, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from sqlalchemy.exc import IntegrityError

from marketplace import db, limiter
from marketplace.business.core.validation import parse_text
from marketplace.data.users.user import ROLES, ROLE_CUSTOMER, User
from marketplace.logger import get_logger
from marketplace.presentation.routes.helpers import request_payload, respond
from marketplace.utils.logging_sanitizer import sanitize_dict

logger = get_logger("marketplace.auth")
auth = Blueprint('auth', __name__)

MIN_PASSWORD_LENGTH = 8


@auth.route('/csrf-token', methods=['GET'])
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


@auth.route('/register', methods=['POST'])
@limiter.limit("20 per hour")
def register():
    data, invalid = request_payload()
    if invalid:
        return respond(invalid)
    logger.debug(f"Registration request: {sanitize_dict(data)}")

    name, error = parse_text(data.get('name'), 'name', max_length=255)
    if error is None:
        email, error = parse_text(data.get('email'), 'email', max_length=255)
    if error is not None:
        return jsonify(error.to_payload()), error.http_status

    password = data.get('password')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({'message': f'The password must be at least {MIN_PASSWORD_LENGTH} characters.', 'error': 'validation'}), 400

    role = data.get('role', ROLE_CUSTOMER)
    if role not in ROLES:
        return jsonify({'message': f"The role must be one of: {', '.join(ROLES)}.", 'error': 'validation'}), 400

    user = User(name=name, email=email.lower(), role=role)
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(f"Registration with existing email: {email}")
        return jsonify({'message': 'The email has already been taken.', 'error': 'conflict'}), 409

    login_user(user)
    logger.info(f"Registered {role} {user.id}")
    return jsonify({'message': 'Registered successfully.', 'user': user.to_dict()}), 201


@auth.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    data, invalid = request_payload()
    if invalid:
        return respond(invalid)
    email = data.get('email')
    email = email.strip().lower() if isinstance(email, str) else ''
    password = data.get('password')
    password = password if isinstance(password, str) else ''

    if not email or not password:
        logger.warning(f"Login attempt with missing credentials for: {email}")
        return jsonify({'message': 'Please enter both email and password', 'error': 'validation'}), 400

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        logger.warning(f"Failed login attempt for: {email}")
        return jsonify({'message': 'Invalid email or password', 'error': 'unauthenticated'}), 401

    if not user.is_active:
        logger.warning(f"Login attempt for disabled account: {email}")
        return jsonify({'message': 'Account is disabled', 'error': 'forbidden'}), 403

    login_user(user, remember=bool(data.get('remember')))
    logger.info(f"Successful login for user {user.id}")
    return jsonify({'message': f'Welcome, {user.name}!', 'user': user.to_dict()})


@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    user_id = current_user.id
    logout_user()
    logger.info(f"User logged out: {user_id}")
    return jsonify({'message': 'You have been logged out'})


@auth.route('/user', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())
