import os
import logging
from flask import Flask, request, jsonify, send_from_directory, render_template, make_response
from flask_cors import CORS
from dotenv import load_dotenv

from question_generator import generate_questions, DEFAULT_CORRECTION_WORKERS
from utils.extractors import extract_text
from utils.grammar import correct_grammar, identity_corrector


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
STATIC_FOLDER = os.path.join(BASE_DIR, "static")
app = Flask(__name__, static_folder=STATIC_FOLDER, static_url_path='')
CORS(app)

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("questly")

GRAMMAR_CHECK = os.getenv("QUESTLY_GRAMMAR_CHECK", "1").strip().lower() not in ("0", "false", "no")
GRAMMAR_WORKERS = int(os.getenv("QUESTLY_GRAMMAR_WORKERS", DEFAULT_CORRECTION_WORKERS))
DOWNLOAD_NAME = "questly_generated_questions.html"

app.config["QUESTLY_CORRECTOR"] = correct_grammar if GRAMMAR_CHECK else identity_corrector
app.config["QUESTLY_GRAMMAR_WORKERS"] = GRAMMAR_WORKERS


@app.route('/')
def index():
    return send_from_directory(app.static_folder, 'index.html')


def _read_source_text():
    """Return (text, None) from an uploaded file or JSON body, or (None, error_response)."""
    if 'file' in request.files:
        f = request.files['file']
        if f.filename == '':
            return None, (jsonify({'error': 'No selected file'}), 400)
        text = extract_text(f)
        logger.info("Extracted %d characters from %s", len(text), f.filename)
        return text, None
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'text' not in data:
        return None, (jsonify({'error': 'Provide a file upload or a JSON body with "text"'}), 400)
    return str(data.get('text') or ''), None


def _generate(text):
    return generate_questions(
        text,
        corrector=app.config["QUESTLY_CORRECTOR"],
        max_workers=app.config["QUESTLY_GRAMMAR_WORKERS"],
    )


def render_questions_page(questions):
    """Printable HTML document for a generated question list."""
    questions = list(questions) if isinstance(questions, (list, tuple)) else [str(questions)]
    return render_template("questions.html", questions=questions, count=len(questions))


@app.route("/generate-questions", methods=["POST"])
def generate_questions_route():
    text, error = _read_source_text()
    if error:
        return error
    try:
        questions = _generate(text)
    except Exception as e:
        logger.exception("Question generation failed")
        return jsonify({"error": "Question generation failed", "details": str(e)}), 500
    return jsonify({"questions": questions, "count": len(questions)})


@app.route("/questions.html", methods=["POST"])
def questions_page():
    text, error = _read_source_text()
    if error:
        return error
    try:
        questions = _generate(text)
    except Exception as e:
        logger.exception("Question generation failed")
        return jsonify({"error": "Question generation failed", "details": str(e)}), 500
    resp = make_response(render_questions_page(questions))
    resp.headers['Content-Type'] = 'text/html; charset=utf-8'
    if request.args.get('download') == '1' or request.form.get('download') == '1':
        resp.headers['Content-Disposition'] = f'attachment; filename={DOWNLOAD_NAME}'
    return resp


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5000)), debug=True)
