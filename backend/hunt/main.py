from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from hunt.auth import authenticate_admin
from hunt.api.validation import get_payload, require_string

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the treasure hunt server!'})

@main.route('/api/auth/login', methods=['POST'])
def admin_login():
    data = get_payload()
    email = require_string(data, 'email', min_length=3)
    password = require_string(data, 'password', min_length=4)
    token = authenticate_admin(email, password)
    return jsonify({'token': token})

@main.route('/api/auth/me')
@login_required
def admin_me():
    return jsonify({'email': current_user.email, 'role': current_user.role})
