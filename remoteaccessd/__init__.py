"""
Headless WiFi remote access daemon for Raspberry Pi. A button toggles WiFi,
starts a WPS connection or a wpa_supplicant.conf on a USB stick gets imported.
"""
__version__ = "1.0.0"
