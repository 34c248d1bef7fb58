"""Live analyzer input. ``stream`` needs sounddevice and PortAudio; ``analysis`` is numpy only."""
