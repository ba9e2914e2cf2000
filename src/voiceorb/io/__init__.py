"""Offline rendering and file export."""

from voiceorb.io.exporter import FrameExporter, render_frames
