"""
Check Context Sizes

Shows how much of a world/character/events request survives at different
token limits. Reads a ContextRequest JSON file, or uses a built-in sample.

Usage:
    python scripts/check_context_sizes.py
    python scripts/check_context_sizes.py request.json --limit 50 --limit 200
    python scripts/check_context_sizes.py request.json --prompt-type decision --show-context
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.context import ContextRequest, InvalidContextRequest, PromptType
from services.context_manager import ContextAssembler

DEFAULT_LIMITS = [25, 75, 150, 1000]


def create_sample_request():
    """Create a realistic request for a dark fantasy session."""
    return {
        "world": {
            "id": "world-ravengard",
            "name": "Ravengard",
            "genre": "dark fantasy",
            "description": (
                "A rain-soaked city of guilds and crumbling nobility. "
                "Old debts are settled in alleys, and the Crimson Brotherhood "
                "watches every tavern."
            ),
            "attributes": [
                {"id": "attr-str", "name": "Strength", "description": "Raw physical power"},
                {"id": "attr-cun", "name": "Cunning", "description": "Wits and deception"}
            ],
            "skills": [
                {"id": "skill-stealth", "name": "Stealth", "description": "Moving unseen"},
                {"id": "skill-blades", "name": "Blades", "description": "Knives and short swords"}
            ]
        },
        "character": {
            "id": "char-alaric",
            "name": "Alaric the Shadow",
            "level": 7,
            "description": "A guild assassin hunting the mentor who betrayed him.",
            "attributes": [
                {"attributeId": "attr-str", "name": "Strength", "value": 5},
                {"attributeId": "attr-cun", "name": "Cunning", "value": 9}
            ],
            "skills": [
                {"skillId": "skill-stealth", "name": "Stealth", "value": 8}
            ],
            "inventory": [
                {"id": "item-dagger", "name": "Poisoned dagger", "equipped": True},
                {"id": "item-knives", "name": "Throwing knives", "quantity": 3},
                {"id": "item-picks", "name": "Lock picks"}
            ]
        },
        "recentEvents": [
            "Alaric entered the tavern, scanning for his target.",
            "A hooded rival assassin took the corner table.",
            "The guard began asking questions about his business."
        ],
        "currentSituation": "Lord Blackwood rises to leave with a sealed package.",
        "promptType": "decision"
    }


def load_request(path):
    """Load a request payload from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser(description='Check assembled context sizes at different token limits')
    parser.add_argument('request_file', nargs='?', help='ContextRequest JSON file (default: built-in sample)')
    parser.add_argument('--limit', type=int, action='append', dest='limits',
                        help='Token limit to test (repeatable)')
    parser.add_argument('--prompt-type', choices=[p.value for p in PromptType],
                        help='Override the request prompt type')
    parser.add_argument('--show-context', action='store_true', help='Print the assembled context')
    args = parser.parse_args()

    try:
        payload = load_request(args.request_file) if args.request_file else create_sample_request()
        if args.prompt_type:
            payload['promptType'] = args.prompt_type
        base_request = ContextRequest.from_dict(payload)
    except (OSError, json.JSONDecodeError, InvalidContextRequest) as e:
        print(f"[FAIL] Could not load request: {e}")
        return 1

    assembler = ContextAssembler()
    limits = args.limits or DEFAULT_LIMITS

    print("=" * 70)
    print("CONTEXT SIZES")
    print("=" * 70)
    print(f"{'Limit':<8} {'Offered':<10} {'Final':<8} {'Retention':<11} {'Dropped':<9} {'Truncated'}")
    print("-" * 70)

    for limit in limits:
        base_request.token_limit = limit
        result = assembler.assemble(base_request)

        print(
            f"{limit:<8} {result.estimated_token_count:<10} {result.final_token_count:<8} "
            f"{result.context_retention_percentage:<10.1f}% {result.dropped_count:<9} "
            f"{'yes' if result.was_truncated else 'no'}"
        )

        if args.show_context:
            print()
            print(result.context)
            print("-" * 70)

    return 0


if __name__ == '__main__':
    sys.exit(main())
