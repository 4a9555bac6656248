from src.core.upload import Accepted, AdmissionOutcome, AdmissionProfile, Rejected, UploadCandidate


def _format_size(size: int) -> str:
    mib = size / (1024 * 1024)
    return f"{mib:.1f} MiB" if mib >= 1 else f"{size} bytes"


class AdmissionFilter:
    """Accepts or rejects an upload before anything is written to storage.

    Rules are checked in order (batch size, file size, MIME type) and the first
    failing one decides the rejection reason. Rejections are returned, never raised.
    """

    def __init__(self, profile: AdmissionProfile):
        self.profile = profile

    def admit(self, candidate: UploadCandidate, batch_size: int = 1) -> AdmissionOutcome:
        profile = self.profile

        if batch_size > profile.max_files:
            return Rejected(
                code="too_many_files",
                reason=f"too many files: {batch_size} submitted, maximum is {profile.max_files} per upload",
            )

        if candidate.size > profile.max_file_size:
            return Rejected(
                code="too_large",
                reason=(
                    f"too large: {candidate.original_name} is {_format_size(candidate.size)}, "
                    f"maximum is {_format_size(profile.max_file_size)}"
                ),
            )

        mime_type = candidate.mime_type.strip().lower()
        if mime_type not in profile.allowed_mime_types:
            allowed = ", ".join(profile.allowed_mime_types)
            return Rejected(
                code="unsupported_type",
                reason=f"unsupported type: {candidate.mime_type or 'unknown'} (allowed: {allowed})",
            )

        return Accepted(candidate=candidate, profile=profile)
