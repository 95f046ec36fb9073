import yaml

DELIMITER = "---"


def separate_frontmatter(content: str) -> tuple[dict, str]:
    """Split a post into its YAML frontmatter and markdown body."""
    if not content.startswith(DELIMITER):
        return {}, content

    lines = content.split("\n")
    end_index = -1
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            end_index = i
            break

    if end_index == -1:
        return {}, content

    frontmatter_text = "\n".join(lines[1:end_index])
    body = "\n".join(lines[end_index + 1:])

    try:
        frontmatter = yaml.safe_load(frontmatter_text)
    except yaml.YAMLError:
        return {}, content

    if frontmatter is None:
        frontmatter = {}
    if not isinstance(frontmatter, dict):
        return {}, content

    return frontmatter, body


def rebuild_frontmatter(frontmatter: dict) -> str:
    if not frontmatter:
        return ""

    yaml_content = yaml.dump(frontmatter, allow_unicode=True, default_flow_style=False, sort_keys=False)
    return f"{DELIMITER}\n{yaml_content}{DELIMITER}\n"
