"""
CYAI Threat Platform - API Server

Provides the detection functions and the RESTful API for the dashboard
"""

from __future__ import annotations

import json
import queue
import socket
import random
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from flask import Flask, Response, jsonify, request, stream_with_context
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config.app_config import AppConfig, DEFAULT_DETECTION_SERVICE_URL, get_config
from config.logging_config import configure_logging
from core.exceptions import CyaiError, ValidationError, NotFoundError, IngestionError
from core import threat_catalog
from core.advanced_detection import AdvancedThreatDetector, is_blank
from core.alerting import AlertFeed, DetectionHistory
from core.analysis_pipeline import AnalysisPipeline
from core.detection_client import DetectionServiceClient
from core.explanation import generate_ai_explanation
from core.ingestion import parse_upload, normalize_flow, render_sample
from core.mock_detection import generate_mock_detection
from core.network_detection import NetworkThreatDetector
from core.report_generator import ReportGenerator, ReportFilters
from core.threat_analytics import as_results, build_analytics
from database.db_manager import get_db_manager, DatabaseManager
from api.job_manager import AnalysisJobManager

logger = logging.getLogger(__name__)

SSE_KEEPALIVE_SECONDS = 15


def create_app(
    config: Optional[AppConfig] = None,
    db: Optional[DatabaseManager] = None,
    detection_client: Optional[DetectionServiceClient] = None,
    rng: Optional[random.Random] = None
):
    """Create Flask application"""
    config = config or get_config()

    # Initialize database manager (persistent storage)
    db = db or get_db_manager(config.database.url, config.storage.model_dir)

    app = Flask(__name__)
    CORS(app, origins=config.server.cors_origins)

    app.cyai_config = config
    app.db = db

    # Initialize components
    rng = rng or random.Random()
    network_detector = NetworkThreatDetector(db, rng)
    advanced_detector = AdvancedThreatDetector(db, rng)
    report_gen = ReportGenerator(db_manager=db, config=config.report)
    client = detection_client or DetectionServiceClient.from_config(config.detection_service)
    pipeline = AnalysisPipeline(client, config.pipeline, rng)
    job_manager = AnalysisJobManager.get_instance()
    alert_feed = AlertFeed()
    history = DetectionHistory()

    app.job_manager = job_manager
    app.alert_feed = alert_feed
    app.detection_history = history

    def json_body():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def posted_results(data):
        results = data.get('detectionResults')
        if results is None:
            return report_gen.load_results()
        if not isinstance(results, list):
            raise ValidationError("detectionResults must be a list")
        return as_results(results)

    # ==================== Error Handling ====================

    @app.errorhandler(CyaiError)
    def handle_cyai_error(e):
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        logger.exception(f"[API] Unhandled error on {request.method} {request.path}")
        return jsonify({"error": str(e)}), 500

    # ==================== Detection Functions ====================

    @app.route('/functions/v1/ai-threat-detection', methods=['POST'])
    def ai_threat_detection():
        """Classify network flow records"""
        data = json_body()
        return jsonify(network_detector.detect(
            data.get('networkData'),
            data.get('analysisType') or 'real_time'
        ))

    @app.route('/functions/v1/ai-advanced-detection', methods=['POST'])
    def ai_advanced_detection():
        """Category-specific verdict for a simulation payload"""
        data = json_body()
        return jsonify(advanced_detector.detect(data.get('simulationData'), data.get('category')))

    # ==================== Health & Catalog ====================

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check"""
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "name": config.name,
            "version": config.version,
            "database": "connected",
            "stats": db.get_stats()
        })

    @app.route('/api/categories', methods=['GET'])
    def list_categories():
        """List threat categories"""
        return jsonify({"categories": [c.to_dict() for c in threat_catalog.list_categories()]})

    @app.route('/api/categories/<category_id>', methods=['GET'])
    def get_category(category_id):
        """Category with its details sheet"""
        category = threat_catalog.get_category(category_id)
        if category is None:
            raise NotFoundError(f"Unknown category: {category_id}")
        return jsonify({**category.to_dict(), "details": threat_catalog.describe_category(category_id)})

    # ==================== Data Ingestion ====================

    @app.route('/api/uploads', methods=['POST'])
    def upload_data():
        """Parse an uploaded CSV / JSON flow file"""
        upload = request.files.get('file')
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded")
        try:
            text = upload.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            raise IngestionError("File is not valid UTF-8 text")

        records = [normalize_flow(r) for r in parse_upload(upload.filename, text)]
        return jsonify({"fileName": upload.filename, "count": len(records), "records": records})

    @app.route('/api/sample-data', methods=['GET'])
    def sample_data():
        """Download the built-in sample dataset"""
        fmt = request.args.get('format', 'json').lower()
        body = render_sample(fmt)
        mimetype = 'text/csv' if fmt == 'csv' else 'application/json'
        return Response(body, mimetype=mimetype, headers={
            'Content-Disposition': f'attachment; filename=sample_data.{fmt}'
        })

    # ==================== Models ====================

    @app.route('/api/models', methods=['GET'])
    def list_models():
        """List registered models"""
        models = db.list_models(request.args.get('model_type'))
        return jsonify({"models": [m.to_dict() for m in models]})

    @app.route('/api/models', methods=['POST'])
    def upload_model():
        """Upload a model file"""
        upload = request.files.get('file')
        if upload is None or not upload.filename:
            raise ValidationError("No model file uploaded")

        form = request.form
        model_type = form.get('model_type', '')
        if not threat_catalog.is_known_category(model_type):
            raise ValidationError(f"Unknown model type: {model_type}")

        accuracy = form.get('accuracy')
        try:
            accuracy = float(accuracy) if accuracy not in (None, '') else None
            model_config = json.loads(form['model_config']) if form.get('model_config') else {}
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid model metadata: {e}")

        model = db.upload_model(
            file_name=upload.filename,
            content=upload.read(),
            name=form.get('name', ''),
            model_type=model_type,
            version=form.get('version', ''),
            model_config=model_config,
            accuracy=accuracy,
        )
        return jsonify(model.to_dict()), 201

    @app.route('/api/models/<model_id>/activate', methods=['POST'])
    def activate_model(model_id):
        """Activate a model for its type"""
        return jsonify(db.activate_model(model_id).to_dict())

    @app.route('/api/models/<model_id>', methods=['DELETE'])
    def delete_model(model_id):
        """Delete model"""
        db.delete_model(model_id)
        return jsonify({"message": "Deleted"})

    # ==================== Records ====================

    @app.route('/api/predictions', methods=['GET'])
    def list_predictions():
        """Recent predictions"""
        limit = request.args.get('limit', 100, type=int)
        predictions = db.list_predictions(limit, request.args.get('model_id'))
        return jsonify({"predictions": [p.to_dict() for p in predictions]})

    @app.route('/api/detections', methods=['GET'])
    def list_detections():
        """Recent threat detections"""
        limit = request.args.get('limit', 100, type=int)
        return jsonify({"detections": [d.to_dict() for d in db.list_threat_detections(limit)]})

    @app.route('/api/detections/<detection_id>', methods=['PATCH'])
    def update_detection(detection_id):
        """Change a detection's triage status"""
        detection = db.update_detection_status(detection_id, json_body().get('status'))
        return jsonify(detection.to_dict())

    # ==================== Mock Detection ====================

    @app.route('/api/mock-detection', methods=['POST'])
    def mock_detection():
        """Local random detection for a category"""
        category = json_body().get('category')
        if not category:
            raise ValidationError("Missing category")
        result = generate_mock_detection(category, rng)
        history.add(result)
        return jsonify({
            "result": result.to_dict(),
            "explanation": generate_ai_explanation(result).to_dict()
        })

    # ==================== Pipeline Jobs ====================

    @app.route('/api/analysis', methods=['POST'])
    def start_analysis():
        """Start a staged detection analysis"""
        data = json_body()
        simulation_data = data.get('simulationData')
        category = data.get('category')
        if is_blank(simulation_data) or not category:
            raise ValidationError('Missing simulation data or category')

        job = job_manager.start_job(
            'analysis',
            lambda progress: pipeline.run_detection_analysis(simulation_data, category, progress),
            on_complete=lambda outcome: history.add(outcome.result)
        )
        return jsonify({"jobId": job.id, "status": job.status}), 202

    @app.route('/api/scans', methods=['POST'])
    def start_scan():
        """Start a network threat scan"""
        data = json_body()
        network_data = data.get('networkData')
        if not network_data or not isinstance(network_data, list):
            raise ValidationError('No data available')
        analysis_type = data.get('analysisType') or 'network_intrusion'

        job = job_manager.start_job(
            'scan',
            lambda progress: pipeline.run_threat_scan(network_data, analysis_type, progress),
            on_complete=lambda outcome: alert_feed.add_threats(outcome.threats)
        )
        return jsonify({"jobId": job.id, "status": job.status}), 202

    @app.route('/api/jobs/<job_id>', methods=['GET'])
    def get_job(job_id):
        """Poll job state"""
        job = job_manager.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")
        return jsonify(job.to_dict())

    @app.route('/api/jobs/<job_id>/stream', methods=['GET'])
    def stream_job(job_id):
        """Stream job progress as server-sent events"""
        job = job_manager.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")

        q = job_manager.subscribe(job)

        def stream():
            try:
                while True:
                    try:
                        msg = q.get(timeout=SSE_KEEPALIVE_SECONDS)
                    except queue.Empty:
                        if job.is_done:
                            break
                        yield ": keep-alive\n\n"
                        continue
                    yield msg
                    if job.is_done and q.empty():
                        break
            finally:
                job_manager.unsubscribe(job, q)

        return Response(stream_with_context(stream()), mimetype='text/event-stream')

    # ==================== Alerts & History ====================

    @app.route('/api/alerts', methods=['GET'])
    def list_alerts():
        """Latest alerts raised by scans"""
        return jsonify({"alerts": [a.to_dict() for a in alert_feed.alerts]})

    @app.route('/api/alerts/<alert_id>', methods=['DELETE'])
    def dismiss_alert(alert_id):
        """Dismiss alert"""
        if alert_feed.dismiss(alert_id):
            return jsonify({"message": "Dismissed"})
        return jsonify({"error": "Alert not found"}), 404

    @app.route('/api/history', methods=['GET'])
    def detection_history():
        """Detection results from this server session, newest first"""
        return jsonify({"results": [r.to_dict() for r in history.results]})

    # ==================== Analytics & Reports ====================

    @app.route('/api/analytics', methods=['POST'])
    def analytics():
        """Dashboard aggregates"""
        return jsonify(build_analytics(posted_results(json_body())))

    @app.route('/api/reports', methods=['POST'])
    def generate_report():
        """Generate a report download"""
        data = json_body()
        filters = ReportFilters.from_dict(data.get('filters'))
        report = report_gen.compile_report(posted_results(data), filters)

        if data.get('format') == 'json':
            content, mimetype, extension = report_gen.render_json(report), 'application/json', 'json'
        else:
            content, mimetype, extension = report_gen.render_text(report), 'text/plain', 'txt'

        filename = report_gen.report_filename(extension=extension)
        if data.get('save'):
            report_gen.write_report(content, filename)

        return Response(content, mimetype=mimetype, headers={
            'Content-Disposition': f'attachment; filename={filename}'
        })

    @app.route('/api/reports/preview', methods=['POST'])
    def preview_report():
        """HTML print preview"""
        data = json_body()
        filters = ReportFilters.from_dict(data.get('filters'))
        report = report_gen.compile_report(posted_results(data), filters)
        return Response(report_gen.render_html(report), mimetype='text/html')

    @app.route('/api/reports/stats', methods=['POST'])
    def report_stats():
        """Severity counts for the current filter selections"""
        data = json_body()
        filters = ReportFilters.from_dict(data.get('filters'))
        return jsonify(report_gen.filtered_stats(posted_results(data), filters))

    return app


def is_port_available(port: int, host: str = '0.0.0.0') -> bool:
    """
    Check if a port is available.

    Args:
        port: Port number to check
        host: Host address to bind to

    Returns:
        True if port is available, False otherwise
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((host, port))
            return True
    except OSError:
        return False


def find_available_port(start_port: int = 5000, max_attempts: int = 100, host: str = '0.0.0.0') -> int:
    """
    Find an available port starting from start_port.
    If start_port is occupied, tries random ports in range 5000-9999.

    Args:
        start_port: Preferred starting port
        max_attempts: Maximum number of attempts to find available port

    Returns:
        Available port number
    """
    if is_port_available(start_port, host):
        return start_port

    logger.warning(f"[Server] Port {start_port} is already in use. Searching for available port...")

    for _ in range(max_attempts):
        random_port = random.randint(5000, 9999)
        if is_port_available(random_port, host):
            logger.info(f"[Server] Found available port: {random_port}")
            return random_port

    raise RuntimeError(f"Could not find an available port after {max_attempts} attempts")


def align_detection_service(config: AppConfig, port: int) -> str:
    """
    Keep the detection service URL on the port the server actually binds.

    The built-in loopback default follows the chosen port. An explicit URL is
    left alone, with a warning when it targets this host on another port.
    """
    service = config.detection_service
    if service.base_url == DEFAULT_DETECTION_SERVICE_URL:
        service.base_url = f"http://127.0.0.1:{port}"
        return service.base_url

    parsed = urlparse(service.base_url)
    if parsed.hostname in ('127.0.0.1', 'localhost') and parsed.port not in (None, port):
        logger.warning(
            f"[Server] Detection service URL {service.base_url} does not match server port {port}; "
            f"jobs will use local fallback detection if it is unreachable"
        )
    return service.base_url


def main(config: Optional[AppConfig] = None, port: Optional[int] = None):
    """Main entry point"""
    config = config or get_config()
    configure_logging(config.logging)

    port = find_available_port(port or config.server.port, host=config.server.host)
    align_detection_service(config, port)
    app = create_app(config)

    print(f"""
╔══════════════════════════════════════════════════════════════════╗
║            🛡️  CYAI Threat Detection API Server  🛡️              ║
╚══════════════════════════════════════════════════════════════════╝

Detection Functions:
  POST /functions/v1/ai-threat-detection   - Classify network flows
  POST /functions/v1/ai-advanced-detection - Category verdict

  GET  /api/health              - Health check
  GET  /api/categories          - Threat categories
  POST /api/uploads             - Parse CSV / JSON flow file
  GET  /api/models              - Registered models
  GET  /api/detections          - Stored detections
  POST /api/analysis            - Start staged analysis job
  POST /api/scans               - Start network scan job
  GET  /api/jobs/<id>/stream    - Job progress (SSE)
  POST /api/reports             - Generate report

🌐 Server starting on http://{config.server.host}:{port}
""")

    app.run(host=config.server.host, port=port, debug=config.server.debug, threaded=True)


if __name__ == '__main__':
    main()
