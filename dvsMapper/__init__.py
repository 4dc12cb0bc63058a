"""dvsMapper - DVS telemetry to thin-edge JSON mapper

Contains:
    - core.dvs: DVS topic/payload grammar and measurement decoder
    - core.measurement: Grouped measurement protocol and MeasurementGrouper
    - core.serialize: Thin-edge JSON serializer
    - core.converter: Decode + serialize pipeline
    - core.mapperService: Transport-driven mapper
"""

__version__ = "1.0-beta"
