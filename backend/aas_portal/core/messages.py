"""
User-facing message catalogue.

Services raise errors carrying a message key; the API layer renders the key
in the locale negotiated from the request's Accept-Language header.
"""
from typing import Dict, Optional

MESSAGES: Dict[str, Dict[str, str]] = {
    "ar": {
        "loading": "جاري التحميل...",
        "login_required": "يجب تسجيل الدخول أولاً",
        "invalid_credentials": "رقم الهاتف أو الرقم السري غير صحيح",
        "too_many_attempts": "محاولات كثيرة، حاول مرة أخرى لاحقاً",
        "verification_required": "يجب التحقق من حسابك من قبل الإدارة قبل الوصول إلى هذه الصفحة",
        "admin_required": "هذه الصفحة مخصصة للإدارة",
        "not_authorized": "غير مصرح لك بهذا الإجراء",
        "phone_invalid": "رقم الهاتف يجب أن يكون 8 أرقام",
        "pin_invalid": "الرقم السري يجب أن يكون 4 أرقام",
        "documents_required": "جميع الملفات مطلوبة",
        "insurance_dates_invalid": "تاريخ انتهاء التأمين يجب أن يكون بعد تاريخ البداية",
        "phone_taken": "رقم الهاتف مستخدم من قبل",
        "registration_failed": "حدث خطأ أثناء التسجيل",
        "accident_images_min": "يجب رفع صورتين للحادث على الأقل",
        "claim_submit_failed": "حدث خطأ أثناء تقديم المطالبة",
        "claim_update_failed": "حدث خطأ أثناء تحديث المطالبة",
        "claim_not_found": "المطالبة غير موجودة",
        "user_not_found": "المستخدم غير موجود",
        "post_not_found": "المنشور غير موجود",
        "record_conflict": "تم تعديل هذا السجل من قبل مستخدم آخر، أعد تحميل الصفحة",
        "comment_empty": "لا يمكن إرسال تعليق فارغ",
        "post_fields_required": "العنوان والمحتوى مطلوبان",
        "no_files": "لم يتم اختيار أي ملف",
        "too_many_files": "يمكن اختيار ملف واحد فقط",
        "files_too_large": "الملفات التالية كبيرة جداً (أكثر من {max_size}MB): {names}",
        "file_type_not_allowed": "نوع الملفات التالية غير مدعوم ({accept}): {names}",
        "upload_failed": "حدث خطأ أثناء رفع الملفات",
        "upload_cancelled": "تم إلغاء الرفع",
        "unknown_upload_purpose": "نوع الرفع غير معروف",
        "route_not_found": "مسار الواجهة البرمجية غير موجود",
        "password_too_short": "كلمة المرور يجب أن تكون 8 أحرف على الأقل",
        "password_lowercase": "كلمة المرور يجب أن تحتوي على حرف صغير",
        "password_uppercase": "كلمة المرور يجب أن تحتوي على حرف كبير",
        "password_digit": "كلمة المرور يجب أن تحتوي على رقم",
        "passwords_mismatch": "كلمتا المرور غير متطابقتين",
        "invite_token_missing": "لم يتم العثور على رمز الدعوة أو الاستعادة في الرابط",
        "identity_error": "حدث خطأ أثناء إعداد كلمة المرور: {detail}",
        "invalid_widget_mode": "وضع غير مدعوم",
    },
    "en": {
        "loading": "Loading...",
        "login_required": "You must log in first",
        "invalid_credentials": "Phone number or PIN is incorrect",
        "too_many_attempts": "Too many attempts, try again later",
        "verification_required": "Your account must be verified by the administration before accessing this page",
        "admin_required": "This page is reserved for administrators",
        "not_authorized": "You are not allowed to perform this action",
        "phone_invalid": "Phone number must be 8 digits",
        "pin_invalid": "PIN must be 4 digits",
        "documents_required": "All files are required",
        "insurance_dates_invalid": "Insurance end date must be after the start date",
        "phone_taken": "This phone number is already registered",
        "registration_failed": "An error occurred during registration",
        "accident_images_min": "At least two accident photos are required",
        "claim_submit_failed": "An error occurred while submitting the claim",
        "claim_update_failed": "An error occurred while updating the claim",
        "claim_not_found": "Claim not found",
        "user_not_found": "User not found",
        "post_not_found": "Post not found",
        "record_conflict": "This record was changed by someone else, reload and try again",
        "comment_empty": "A comment cannot be empty",
        "post_fields_required": "Title and content are required",
        "no_files": "No file selected",
        "too_many_files": "Only one file can be selected",
        "files_too_large": "The following files are too large (over {max_size}MB): {names}",
        "file_type_not_allowed": "The following files have an unsupported type ({accept}): {names}",
        "upload_failed": "An error occurred while uploading files",
        "upload_cancelled": "Upload cancelled",
        "unknown_upload_purpose": "Unknown upload type",
        "route_not_found": "No such API route",
        "password_too_short": "Password must be at least 8 characters",
        "password_lowercase": "Password must include a lowercase letter",
        "password_uppercase": "Password must include an uppercase letter",
        "password_digit": "Password must include a number",
        "passwords_mismatch": "Passwords do not match",
        "invite_token_missing": "No invitation or recovery token found in the URL.",
        "identity_error": "An error occurred while setting up the password: {detail}",
        "invalid_widget_mode": "Unsupported mode",
    },
}

FALLBACK_LOCALE = "ar"


def negotiate_locale(accept_language: Optional[str], default: str = FALLBACK_LOCALE) -> str:
    """Pick the first supported language from an Accept-Language header."""
    if not accept_language:
        return default
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().lower()
        if not tag:
            continue
        primary = tag.split("-")[0]
        if primary in MESSAGES:
            return primary
    return default


def translate(key: str, locale: Optional[str] = None, **params) -> str:
    catalogue = MESSAGES.get(locale or FALLBACK_LOCALE, MESSAGES[FALLBACK_LOCALE])
    template = catalogue.get(key) or MESSAGES[FALLBACK_LOCALE].get(key, key)
    if params:
        try:
            return template.format(**params)
        except KeyError:
            return template
    return template
