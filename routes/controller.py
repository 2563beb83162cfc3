from flask import Blueprint, g, render_template, request

from routes.commands import COMMAND_PARAM


def create_controller(dispatcher):
    """Front controller: every request goes through ``dispatcher`` and ends in a view."""
    controller_bp = Blueprint("controller", __name__)

    @controller_bp.route("/", methods=["GET", "POST"])
    @controller_bp.route("/controller", methods=["GET", "POST"])
    def controller():
        g.attributes = {}
        handler = dispatcher.resolve(request.values.get(COMMAND_PARAM))
        view = handler()
        return render_template(f"{view}.html", view=view, **g.attributes)

    return controller_bp
