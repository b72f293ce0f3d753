import os

from flask import Blueprint, current_app, jsonify, send_from_directory

main = Blueprint('main', __name__)


@main.route('/')
def index():
    static_folder = current_app.static_folder
    if not static_folder or not os.path.isfile(os.path.join(static_folder, 'index.html')):
        return jsonify({'error': 'No client installed'}), 404
    return send_from_directory(static_folder, 'index.html')


@main.route('/api/state')
def state():
    return jsonify(current_app.extensions['arena'].snapshot())


@main.route('/healthz')
def healthz():
    return jsonify({'status': 'ok'})
