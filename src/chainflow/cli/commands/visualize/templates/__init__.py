"""Templates for the chain-flow page and SVG drawing."""

from .base import generate_html_template
from .scripts import get_all_scripts
from .styles import get_all_styles, get_svg_styles
from .svg import render_svg

__all__ = [
    "generate_html_template",
    "get_all_scripts",
    "get_all_styles",
    "get_svg_styles",
    "render_svg",
]
