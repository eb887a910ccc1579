"""Patient-facing advisory messages, one per triage level.

Messages are bilingual (Vietnamese first, English after) and tell the
patient what to do now.  The emergency message always directs the patient
to emergency services.
"""

from postop_triage.models.enums import TriageLevel

PATIENT_MESSAGES: dict[TriageLevel, str] = {
    TriageLevel.ROUTINE: (
        "Cảm ơn bạn đã gửi thông tin. Triệu chứng hiện tại nhẹ. Tiếp tục "
        "theo dõi, chăm sóc vết mổ và dùng thuốc theo toa. Nếu triệu chứng "
        "nặng hơn trong 48 giờ tới, vui lòng gửi ảnh vết mổ hoặc liên hệ lại. "
        "(English: Your symptoms look mild. Keep following your aftercare "
        "instructions and contact us again if anything gets worse within "
        "48 hours.)"
    ),
    TriageLevel.ROUTINE_REVIEW: (
        "Cảm ơn bạn. Một số triệu chứng cần được bác sĩ xem lại. Vui lòng "
        "gửi ảnh vết mổ nếu có và đặt lịch tái khám trong vài ngày tới. "
        "(English: Some of your symptoms should be reviewed. Please send a "
        "photo of the wound if you can and book a follow-up visit within "
        "the next few days.)"
    ),
    TriageLevel.URGENT_REVIEW: (
        "Triệu chứng của bạn cần được khám sớm. Nhân viên y tế đã được thông "
        "báo và sẽ liên hệ với bạn trong hôm nay. Nếu tình trạng nặng lên, "
        "hãy đến cơ sở y tế gần nhất. (English: Your symptoms need prompt "
        "review. Our care team has been notified and will contact you today. "
        "If you get worse, go to the nearest clinic.)"
    ),
    TriageLevel.EMERGENCY: (
        "CẢNH BÁO: Thông tin bạn cung cấp có dấu hiệu cần xử trí khẩn cấp. "
        "Hãy gọi cấp cứu 115 hoặc đến khoa cấp cứu gần nhất ngay lập tức. "
        "Bác sĩ đã nhận được cảnh báo. (English: WARNING: your symptoms may "
        "be serious. Call emergency services (115) or go to the nearest "
        "emergency department now. Our doctors have been alerted.)"
    ),
}


def message_for(level: TriageLevel) -> str:
    """Return the advisory message for *level*."""
    return PATIENT_MESSAGES[level]
