"""
Controllers package for Seraglio
"""

from controllers.voice_controller import VoiceController
from controllers.command_controller import CommandController
from controllers.health_controller import HealthController

__all__ = ["VoiceController", "CommandController", "HealthController"]
