from __future__ import annotations

from typing import Iterable, List
import re


MAX_TAGS = 8

_TAG_PATTERN = re.compile(r"^#[^\s#]+$")


def is_normalized_tag(tag: str) -> bool:
    return bool(_TAG_PATTERN.match(tag or ""))


def normalize_tag(raw: str) -> str:
    """
    태그 하나를 정규화한다.

    - 앞뒤 공백 제거, 선행 '#' 제거
    - 여러 단어면 camelCase (첫 단어 소문자, 이후 단어 첫 글자만 대문자)
    - 한 단어면 소문자
    - 항상 '#' 접두사, 빈 입력은 ""
    """
    tag = (raw or "").strip()
    if not tag:
        return ""
    tag = tag.lstrip("#").strip()
    if not tag:
        return ""
    words = tag.split()
    if len(words) > 1:
        tag = words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    else:
        tag = tag.lower()
    return f"#{tag}"


def split_tag_input(raw_input: str) -> List[str]:
    """입력 한 줄을 태그 목록으로 변환 ('#' 이 있으면 '#' 기준 분리, 아니면 하나의 태그)"""
    text = (raw_input or "").strip()
    if not text:
        return []
    if "#" in text:
        parts = [p.strip() for p in text.split("#")]
        return [t for t in (normalize_tag(p) for p in parts if p) if t]
    tag = normalize_tag(text)
    return [tag] if tag else []


def add_tags(existing: Iterable[str], raw_input: str, max_tags: int = MAX_TAGS) -> List[str]:
    """
    기존 태그 목록에 입력을 정규화해 추가한 새 목록을 반환한다.
    중복/빈 태그는 버리고, 상한을 넘는 태그는 추가하지 않는다.
    """
    tags = list(existing)
    if len(tags) >= max_tags:
        return tags
    for tag in split_tag_input(raw_input):
        if len(tags) >= max_tags:
            break
        if tag not in tags:
            tags.append(tag)
    return tags


def normalize_tag_list(values: Iterable[str], max_tags: int = MAX_TAGS) -> List[str]:
    """
    API 입력 태그 목록 정규화.
    이미 정규 형태('#' 접두사, 공백/내부 '#' 없음)인 태그는 그대로 두고
    나머지는 normalize_tag 로 변환한다. 상한 초과 시 ValueError.
    """
    result: List[str] = []
    for value in values:
        tag = value if is_normalized_tag(value) else normalize_tag(value)
        if tag and tag not in result:
            result.append(tag)
    if len(result) > max_tags:
        raise ValueError(f"태그는 최대 {max_tags}개까지 허용됩니다 (입력: {len(result)}개)")
    return result
