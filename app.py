#!/usr/bin/env python3
"""
CodeFight - Web Interface

A small JSON API (plus one status page) over a single GameSystem.
"""

import logging

from flask import Flask, render_template_string, jsonify, request

from codefight.config import GameConfig, check_seed, parse_init_mode
from codefight.errors import (
    CodeFightError,
    ConfigurationError,
    GameStateError,
    PlacementError,
    UnknownProgramError,
)
from codefight.game import GameSystem
from codefight.instructions import PROGRAMS, make_script, parse_program, program_to_string
from codefight import render

logger = logging.getLogger(__name__)

app = Flask(__name__)

# One game per process; the development server runs single-threaded
game = GameSystem(GameConfig.from_env())

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>CodeFight</title>
    <style>
        body { font-family: monospace; background: #0a0a0f; color: #e0e0e0; padding: 2rem; }
        h1 { color: #00ff88; }
        pre { background: #12121a; border: 1px solid #2a2a35; padding: 1rem; }
        .dim { color: #888; }
    </style>
</head>
<body>
    <h1>CodeFight</h1>
    <p class="dim">Arena of {{ size }} cells, {{ mode }}</p>
    <h2>Programs</h2>
    <pre>{% for name in programs %}{{ name }}
{% else %}(none registered){% endfor %}</pre>
    {% if running %}
    <h2>Memory</h2>
    <pre>{{ overview }}</pre>
    <h2>Status</h2>
    <pre>{% for status in statuses %}{{ status }}
{% endfor %}</pre>
    {% else %}
    <p class="dim">No match running. POST /api/match to start one.</p>
    {% endif %}
</body>
</html>
"""


def _status_code(error: CodeFightError) -> int:
    if isinstance(error, UnknownProgramError):
        return 404
    if isinstance(error, GameStateError):
        return 409
    return 400


@app.errorhandler(CodeFightError)
def handle_error(error):
    logger.info("Request failed: %s", error)
    return jsonify({"success": False, "error": str(error)}), _status_code(error)


def _program_statuses():
    return [
        render.render_program_status(game.inspect_program(p.identity))
        for p in game.placed_programs()
    ]


def _cell_json(address: int):
    cell = game.inspect_cell(address)
    return {
        "address": cell.address,
        "opcode": cell.opcode.value,
        "a": cell.a_value,
        "b": cell.b_value,
        "last_modified_by": cell.last_modified_by.label if cell.last_modified_by else None,
        "touched": cell.touched_since_placement,
    }


@app.route('/')
def index():
    running = game.is_running
    return render_template_string(
        HTML_TEMPLATE,
        size=game.arena_size,
        mode=game.init_mode.describe(game.seed),
        programs=game.programs(),
        running=running,
        overview=render.render_overview(game) if running else "",
        statuses=_program_statuses() if running else [],
    )


@app.route('/api/samples')
def api_samples():
    """Example programs, in their text form."""
    return jsonify({
        name: program_to_string(parse_program(source))
        for name, source in PROGRAMS.items()
    })


@app.route('/api/programs')
def api_programs():
    return jsonify({
        "programs": [
            {"name": name, "script": program_to_string(game.registry[name].script)}
            for name in game.programs()
        ]
    })


@app.route('/api/programs', methods=['POST'])
def api_add_program():
    """Register a program from a text script or a list of [opcode, a, b] triples."""
    data = request.get_json(silent=True) or {}
    name = data.get("name", "")
    script = data.get("script")

    if isinstance(script, str):
        instructions = parse_program(script)
    elif isinstance(script, list):
        instructions = make_script(script)
    else:
        raise ConfigurationError("script must be text or a list of [opcode, a, b]")

    program = game.register_program(name, instructions)
    return jsonify({"success": True, "name": program.name, "length": len(program)}), 201


@app.route('/api/programs/<name>', methods=['DELETE'])
def api_remove_program(name):
    game.remove_program(name)
    return jsonify({"success": True})


@app.route('/api/init-mode', methods=['POST'])
def api_init_mode():
    data = request.get_json(silent=True) or {}
    mode = parse_init_mode(str(data.get("mode", "")))
    try:
        seed = check_seed(int(data.get("seed", 0)))
    except (TypeError, ValueError):
        raise ConfigurationError("the entered seed should be a number!")
    old, new = game.set_init_mode(mode, seed)
    return jsonify({"success": True, "old": old, "new": new})


@app.route('/api/match', methods=['POST'])
def api_start_match():
    data = request.get_json(silent=True) or {}
    names = data.get("programs")
    if not isinstance(names, list):
        raise PlacementError("programs must be a list of registered names")
    game.start_match([str(name) for name in names])
    return jsonify({
        "success": True,
        "programs": [p.label for p in game.placed_programs()],
    })


@app.route('/api/match/step', methods=['POST'])
def api_step():
    """Run turns; ``turns`` defaults to 1, a negative value runs to the end."""
    data = request.get_json(silent=True) or {}
    try:
        turns = int(data.get("turns", 1))
    except (TypeError, ValueError):
        raise ConfigurationError("the entered argument should be a number or empty!")
    result = game.step(turns)
    return jsonify({
        "success": True,
        "turns": result.turns,
        "finished": result.finished,
        "eliminations": [
            {"program": e.label, "round_counter": e.round_counter}
            for e in result.eliminations
        ],
    })


@app.route('/api/match', methods=['DELETE'])
def api_end_match():
    summary = game.end_match()
    return jsonify({"success": True, "running": summary.running, "stopped": summary.stopped})


@app.route('/api/memory')
def api_memory():
    """Overview string and every cell; ``?position=`` adds the detailed view."""
    if not game.is_running:
        raise GameStateError("the game must be running to show the memory")
    response = {
        "overview": render.render_overview(game),
        "cells": [_cell_json(address) for address in range(game.arena_size)],
    }
    position = request.args.get("position")
    if position is not None:
        try:
            position = int(position)
        except ValueError:
            raise ConfigurationError("only numbers are allowed for the position!")
        response["detailed"] = render.render_detailed(game, position)
    return jsonify(response)


@app.route('/api/programs/<label>/status')
def api_program_status(label):
    status = game.inspect_program(label)
    return jsonify({
        "program": status.label,
        "alive": status.alive,
        "round_counter": status.round_counter,
        "pointer": status.pointer,
        "next_instruction": str(status.next_instruction) if status.next_instruction else None,
        "text": render.render_program_status(status),
    })


if __name__ == '__main__':
    port = 8080
    print("\n" + "="*50)
    print("CodeFight - Web Interface")
    print("="*50)
    print(f"\nOpen in your browser: http://localhost:{port}")
    print("\nPress Ctrl+C to stop\n")

    app.run(host='0.0.0.0', port=port, debug=False, threaded=False)
