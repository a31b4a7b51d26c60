"""
Simple Flask router for DepthGuard - Clean and Focused
Each feature has its own dedicated handler file.
"""

import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from web_app.depth_analyzer import depth_analyzer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

app = Flask(__name__)
CORS(app)

app.config.update(
    MAX_CONTENT_LENGTH=int(os.getenv('MAX_CONTENT_LENGTH', str(16 * 1024 * 1024))),  # 16MB
)

# Register the blueprints
app.register_blueprint(depth_analyzer)


@app.route('/')
def index():
    """Service description - just navigation."""
    return jsonify({'service': 'depthguard', 'endpoints': ['/analyze_depth']})


if __name__ == '__main__':
    app.run(
        debug=False,
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '5000')),
        threaded=True,  # analysis is per-request and stateless
        use_reloader=False,
    )
