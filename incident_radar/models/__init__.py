from incident_radar.models.requests import AdmissionRequest, SnapshotRequest

__all__ = ["AdmissionRequest", "SnapshotRequest"]
