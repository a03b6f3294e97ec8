"""EDA bridge - an Enervent EDA (Modbus) to MQTT bridge."""

__version__ = "0.4.0"
VERSION = __version__
