#!/usr/bin/env python3
"""Compile email templates by inlining CSS and minifying HTML.

Source templates live in app/templates/emails/*.j2. Compiled output is
written to app/templates/emails/compiled/ and is what the application
renders at runtime.

Run after modifying a source template:
    python scripts/compile_emails.py
"""

import sys
from pathlib import Path

import css_inline
import minify_html
from jinja2 import Environment, FileSystemLoader, select_autoescape

project_root = Path(__file__).parent.parent

# Template name -> Jinja2 variables that must survive compilation
TEMPLATES = {
    "password-reset.j2": ["reset_url", "expiry_hours"],
}

# Minifiers keep quotes around URL-looking attribute values
MARKER_URL_PREFIX = "https://jinja-placeholder.local/var/"


def restore_placeholders(html_content: str, variables: list[str]) -> str:
    """Swap URL markers back to Jinja2 expressions."""
    for var in variables:
        marker = f"{MARKER_URL_PREFIX}{var}"
        jinja_var = f"{{{{ {var} }}}}"
        html_content = html_content.replace(f"={marker}>", f'="{jinja_var}">')
        html_content = html_content.replace(f"={marker} ", f'="{jinja_var}" ')
        html_content = html_content.replace(f'"{marker}"', f'"{jinja_var}"')
        html_content = html_content.replace(marker, jinja_var)
    return html_content


def compile_template(
    env: Environment,
    template_name: str,
    variables: list[str],
    output_dir: Path,
) -> Path:
    """Compile a single email template and return the output path."""
    context = {var: f"{MARKER_URL_PREFIX}{var}" for var in variables}
    html_content = env.get_template(template_name).render(**context)

    html_content = css_inline.inline(html_content)
    html_content = minify_html.minify(html_content, minify_css=True)
    html_content = restore_placeholders(html_content, variables)

    output_path = output_dir / (Path(template_name).stem + ".html")
    output_path.write_text(html_content, encoding="utf-8")
    return output_path


def main() -> int:
    templates_dir = project_root / "app" / "templates" / "emails"
    output_dir = templates_dir / "compiled"
    output_dir.mkdir(exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    print("Compiling email templates...")
    missing = 0
    for template_name, variables in TEMPLATES.items():
        if not (templates_dir / template_name).exists():
            print(f"  x {template_name} (not found)")
            missing += 1
            continue
        output_path = compile_template(env, template_name, variables, output_dir)
        print(f"  ok {template_name} -> {output_path.name}")

    print(f"\nCompiled templates saved to: {output_dir}")
    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
