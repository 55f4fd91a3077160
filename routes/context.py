"""
Context routes.

Assembles, formats and sizes prompt context for the narrative pipeline.
"""

from flask import Blueprint, current_app, jsonify, request
from models.context import CharacterFacts, ContextRequest, InvalidContextRequest, WorldFacts
from services.token_estimator import estimate_tokens
import logging

logger = logging.getLogger(__name__)
context_bp = Blueprint('context', __name__, url_prefix='/context')


def _json_body():
    """Return the request body as a dict, or raise InvalidContextRequest."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidContextRequest("Request body must be a JSON object")
    return payload


def _assembler():
    return current_app.extensions['context_assembler']


@context_bp.errorhandler(InvalidContextRequest)
def handle_invalid_request(error):
    logger.info(f"Rejected context request: {error}")
    return jsonify({'error': str(error)}), 400


@context_bp.route('/assemble', methods=['POST'])
def assemble():
    """
    Assemble prompt context under a token budget.

    Body is a ContextRequest (world, character, recentEvents,
    currentSituation, promptType, tokenLimit). Returns the context
    string with estimated/final token counts and retention.
    """
    context_request = ContextRequest.from_dict(_json_body())

    try:
        result = _assembler().assemble(context_request)
    except Exception as e:
        logger.error(f"Context assembly failed: {e}", exc_info=True)
        return jsonify({'error': str(e)}), 500

    return jsonify(result.to_dict())


@context_bp.route('/format', methods=['POST'])
def format_context():
    """Format world and character facts without any budgeting."""
    payload = _json_body()

    world = WorldFacts.from_dict(payload['world']) if payload.get('world') is not None else None
    character = CharacterFacts.from_dict(payload['character']) if payload.get('character') is not None else None

    builder = _assembler().builder
    return jsonify({
        'world': builder.build_world_context(world),
        'character': builder.build_character_context(character),
        'combined': builder.build_combined_context(world, character)
    })


@context_bp.route('/estimate', methods=['POST'])
def estimate():
    """Estimate the token cost of a piece of text."""
    text = _json_body().get('text')
    if text is not None and not isinstance(text, str):
        raise InvalidContextRequest("text must be a string")

    return jsonify({'tokens': estimate_tokens(text)})
