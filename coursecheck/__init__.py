"""coursecheck: integrity checks for Markdown + Modelica course sites."""

__version__ = "0.1.0"
