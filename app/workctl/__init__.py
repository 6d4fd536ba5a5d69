"""workctl - declarative workstation installer for Debian/Ubuntu desktops.

Installs, verifies and removes a catalog of small-business desktop
applications from the APT and Snap channels.
"""

__version__ = "1.3.0"
