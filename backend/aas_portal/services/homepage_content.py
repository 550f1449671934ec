"""
Landing page content edited as markdown files with YAML front matter.

Each of ``hero.md``, ``about.md`` and ``footer.md`` may override the keys of
its section; anything missing or unreadable falls back to the defaults.
"""
import copy
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONTENT: Dict[str, Dict[str, Any]] = {
    "hero": {
        "title": "ONG A.A.S",
        "subtitle": "جمعية مدنية للتوعية التأمينية ومواكبة المطالبات",
        "logo": "https://i.postimg.cc/mkjyN04T/5.png",
    },
    "about": {
        "title": "من نحن",
        "description": (
            "نحن جمعية مدنية غير ربحية مكرسة لنشر الوعي التأميني وحماية حقوق المؤمنين "
            "ومساعدتهم في الحصول على تعويضاتهم المستحقة."
        ),
    },
    "footer": {
        "orgName": "جمعية التأمين للتوعية",
        "slogan": "التأمين وعي… والتعويض حق.",
        "license": "FA010000360307202511232",
        "licenseDate": "2025-07-04",
        "location": "نواكشوط – موريتانيا",
        "whatsapp": "+222 34 14 14 97",
        "email": "info@ong-aas.mr",
    },
}

FRONT_MATTER_RE = re.compile(r"^---\s*\n(.*?)\n---", re.DOTALL)


def parse_front_matter(text: str) -> Dict[str, Any]:
    match = FRONT_MATTER_RE.match(text.lstrip("﻿"))
    if not match:
        return {}
    data = yaml.safe_load(match.group(1))
    return data if isinstance(data, dict) else {}


def load_homepage_content(content_dir: Optional[str]) -> Dict[str, Dict[str, Any]]:
    content = copy.deepcopy(DEFAULT_CONTENT)
    if not content_dir:
        return content

    base = Path(content_dir)
    for section, defaults in content.items():
        path = base / f"{section}.md"
        if not path.is_file():
            continue
        try:
            overrides = parse_front_matter(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring homepage content {path}: {e}")
            continue
        for key in defaults:
            value = overrides.get(key)
            if value is not None:
                defaults[key] = str(value).strip() if key == "description" else str(value)
    return content
