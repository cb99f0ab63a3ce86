"""
ISC DHCP Scope Converter Flask Application
Provides REST API for converting ISC DHCP Server configuration into
Windows DHCP Server provisioning commands
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, request, jsonify
from flask_cors import CORS
from config_manager import ConfigManager, DEFAULT_CONFIG_PATH
from dhcp_errors import DHCPConfigError
from dhcp_parser import parse_config
from scope_converter import synthesize_commands
from powershell_renderer import render_script

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ('json', 'powershell')

LOG_FORMAT = logging.Formatter(
    '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def setup_logging(app):
    """Configure application logging"""
    # Get logging configuration
    log_level = app.config.get('LOG_LEVEL', 'INFO').upper()
    log_path = app.config.get('LOGGING_PATH', '/var/log/isc-dhcp-converter')

    # Convert log level string to logging constant
    numeric_level = getattr(logging, log_level, logging.INFO)

    # Create log directory if it doesn't exist
    if not os.path.exists(log_path):
        try:
            os.makedirs(log_path, exist_ok=True)
        except PermissionError:
            # Fall back to current directory if we can't create log directory
            log_path = '.'

    # Create rotating file handler (10MB max, keep 5 backups)
    log_file = os.path.join(log_path, 'dhcp-converter.log')
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(LOG_FORMAT)

    # Create console handler for systemd journal
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LOG_FORMAT)

    # Parser and converter modules log through the root logger
    remove_logging_handlers()
    root_logger = logging.getLogger()
    for handler in (file_handler, console_handler):
        handler.dhcp_converter = True
        root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    app.logger.setLevel(numeric_level)
    logging.getLogger('werkzeug').setLevel(numeric_level)


def remove_logging_handlers():
    """Detach and close the root handlers installed by setup_logging"""
    root_logger = logging.getLogger()
    removed = [h for h in root_logger.handlers if getattr(h, 'dhcp_converter', False)]
    for handler in removed:
        root_logger.removeHandler(handler)
        handler.close()
    if removed:
        root_logger.setLevel(logging.WARNING)
    return len(removed)


def read_dhcp_config(path: str) -> str:
    """Read an ISC DHCP configuration file from disk"""
    try:
        with open(path, 'r') as f:
            content = f.read()
            logger.debug(f"Read DHCP config file: {len(content)} bytes")
            return content
    except FileNotFoundError:
        logger.warning(f"DHCP config file not found: {path}")
        raise
    except PermissionError:
        logger.error(f"Permission denied reading DHCP config: {path}")
        raise PermissionError(f"Permission denied reading {path}")


def create_app(config_path=None):
    """Application factory"""
    app = Flask(__name__)

    # Load configuration from ConfigManager
    config_manager = ConfigManager(config_path or DEFAULT_CONFIG_PATH)
    config_dict = config_manager.load()

    # Load all config values into Flask config
    for key, value in config_dict.items():
        app.config[key] = value

    # Type conversions for specific fields
    app.config['DEBUG'] = app.config['FLASK_DEBUG'].lower() == 'true'
    app.config['MAX_CONTENT_LENGTH'] = int(app.config['MAX_CONTENT_LENGTH'])
    app.config['CORS_ORIGINS'] = app.config['CORS_ORIGINS'].split(',')

    # Initialize CORS
    CORS(app, origins=app.config['CORS_ORIGINS'])

    # Setup logging
    setup_logging(app)

    app.logger.debug(f"Worker process {os.getpid()} initialized")

    api_prefix = app.config['API_PREFIX']

    # Add security headers to all responses
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all API responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

        # Converted configuration may describe internal networks
        if request.path.startswith(api_prefix):
            response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
            response.headers['Pragma'] = 'no-cache'
            response.headers['Expires'] = '0'

        return response

    @app.errorhandler(400)
    def bad_request(error):
        app.logger.warning(f"Bad request: {request.method} {request.path} - {str(error)}")
        return jsonify({'error': 'Bad request', 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        app.logger.debug(f"Not found: {request.method} {request.path}")
        return jsonify({'error': 'Not found', 'message': str(error)}), 404

    @app.errorhandler(413)
    def too_large(error):
        app.logger.warning(f"Request too large: {request.method} {request.path}")
        return jsonify({'error': 'Request too large', 'message': str(error)}), 413

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {request.method} {request.path} - {str(error)}", exc_info=True)
        return jsonify({'error': 'Internal server error', 'message': str(error)}), 500

    def config_error_response(e: DHCPConfigError):
        app.logger.warning(f"Invalid DHCP configuration: {str(e)}")
        return jsonify({
            'error': 'Invalid DHCP configuration',
            'message': e.message,
            'line': e.line_number
        }), 400

    def conversion_response(content: str, output_format: str):
        result = synthesize_commands(parse_config(content))
        body = result.to_dict()
        if output_format == 'powershell':
            body['script'] = render_script(result.commands)
        app.logger.info(f"Converted DHCP configuration: {len(result.commands)} commands, "
                        f"{len(result.warnings)} warnings")
        return jsonify(body)

    def posted_config():
        """Configuration text and output format from a JSON body"""
        data = request.get_json(silent=True)
        if not data or not isinstance(data.get('config'), str):
            return None, None
        return data['config'], data.get('format', 'json')

    @app.route('/')
    @app.route(f"{api_prefix}/")
    def index():
        """Health check endpoint"""
        app.logger.debug("Health check accessed")
        return jsonify({
            'status': 'running',
            'service': 'ISC DHCP Scope Converter',
            'version': '1.0.0'
        })

    @app.route(f"{api_prefix}/parse", methods=['POST'])
    def parse():
        """Parse posted configuration and return the structured model"""
        content, _ = posted_config()
        if content is None:
            app.logger.warning("Parse request without config text")
            return jsonify({'error': 'config is required'}), 400

        try:
            config = parse_config(content)
            app.logger.debug(f"Parsed {len(config.subnets)} subnets")
            return jsonify(config.to_dict())
        except DHCPConfigError as e:
            return config_error_response(e)
        except Exception as e:
            app.logger.error(f"Failed to parse DHCP configuration: {str(e)}")
            return jsonify({'error': 'Failed to parse configuration', 'message': str(e)}), 500

    @app.route(f"{api_prefix}/convert", methods=['POST'])
    def convert():
        """Convert posted configuration into provisioning commands"""
        content, output_format = posted_config()
        if content is None:
            app.logger.warning("Convert request without config text")
            return jsonify({'error': 'config is required'}), 400

        if output_format not in OUTPUT_FORMATS:
            app.logger.warning(f"Convert request with unknown format: {output_format}")
            return jsonify({'error': f"format must be one of: {', '.join(OUTPUT_FORMATS)}"}), 400

        try:
            return conversion_response(content, output_format)
        except DHCPConfigError as e:
            return config_error_response(e)
        except Exception as e:
            app.logger.error(f"Failed to convert DHCP configuration: {str(e)}")
            return jsonify({'error': 'Failed to convert configuration', 'message': str(e)}), 500

    @app.route(f"{api_prefix}/convert/current", methods=['GET'])
    def convert_current():
        """Convert the configuration file of the local DHCP server"""
        output_format = request.args.get('format', 'json')
        if output_format not in OUTPUT_FORMATS:
            return jsonify({'error': f"format must be one of: {', '.join(OUTPUT_FORMATS)}"}), 400

        config_file = app.config['DHCP_CONFIG_PATH']
        try:
            content = read_dhcp_config(config_file)
            return conversion_response(content, output_format)
        except FileNotFoundError:
            return jsonify({'error': 'DHCP configuration file not found', 'path': config_file}), 404
        except PermissionError:
            return jsonify({'error': 'Permission denied accessing DHCP configuration'}), 403
        except DHCPConfigError as e:
            return config_error_response(e)
        except Exception as e:
            app.logger.error(f"Failed to convert {config_file}: {str(e)}")
            return jsonify({'error': 'Failed to convert configuration', 'message': str(e)}), 500

    return app


def main():
    """Run the application"""
    app = create_app()

    # Run the development server
    if app.config['DEBUG']:
        app.run(host='0.0.0.0', port=5000, debug=True)
    else:
        # Production should use a proper WSGI server like gunicorn
        app.run(host='0.0.0.0', port=5000)


if __name__ == '__main__':
    main()
