"""
Substitutor generator — render one SubstitutionRequest as a Java compilation unit.

The generated class is a singleton adapting ``invoke(Object[] args)`` to
a typed static call:

    public final class Foo_bar extends Substitutor {
        ...
        @Override
        public final Object invoke(Object[] args) {
            StaticObject arg0 = (StaticObject) args[0];
            int arg1 = (int) args[1];
            return Foo.bar(arg0, arg1);
        }
    }

Rendering is pure string assembly; the same request always renders to
the same bytes.
"""

from __future__ import annotations

from subgen.core.models.config import GeneratorConfig
from subgen.core.models.substitution import SubstitutionRequest
from subgen.core.models.template import GeneratedUnit

# ── Fixed text ──────────────────────────────────────────────────

LICENSE_HEADER = """\
/*
 * Copyright (c) 2019, Oracle and/or its affiliates. All rights reserved.
 * DO NOT ALTER OR REMOVE COPYRIGHT NOTICES OR THIS FILE HEADER.
 *
 * This code is free software; you can redistribute it and/or modify it
 * under the terms of the GNU General Public License version 2 only, as
 * published by the Free Software Foundation.
 *
 * This code is distributed in the hope that it will be useful, but WITHOUT
 * ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or
 * FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
 * version 2 for more details (a copy is included in the LICENSE file that
 * accompanied this code).
 *
 * You should have received a copy of the GNU General Public License version
 * 2 along with this work; if not, write to the Free Software Foundation,
 * Inc., 51 Franklin St, Fifth Floor, Boston, MA 02110-1301 USA.
 *
 * Please contact Oracle, 500 Oracle Parkway, Redwood Shores, CA 94065 USA
 * or visit www.oracle.com if you need additional information or have any
 * questions.
 */
"""

INSTANCE_NAME = "theInstance"
GETTER = "getInstance"
ARGS_NAME = "args"
ARG_NAME = "arg"
NULL_RETURN = "return null;"

TAB_1 = "    "
TAB_2 = TAB_1 * 2

_CLASS_TEMPLATE = """\
// Generated by: {owner}
public final class {name} extends {base} {{
    private static final {base} {instance} = new {name}();

    private {name}() {{
    }}

    public static final {base} {getter}() {{
        return {instance};
    }}

    @Override
    public final Object invoke(Object[] {args}) {{
{body}
    }}
}}
"""


def _simple(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1]


def _package_of(qualified: str) -> str:
    return qualified.rsplit(".", 1)[0] if "." in qualified else ""


# ── Body pieces ─────────────────────────────────────────────────


def cast_to(obj: str, clazz: str) -> str:
    return f"({clazz}) {obj}"


def extract_arg(index: int, clazz: str) -> str:
    """``<T> argN = (<T>) args[N];``"""
    return f"{TAB_2}{clazz} {ARG_NAME}{index} = {cast_to(f'{ARGS_NAME}[{index}]', clazz)};"


def extract_invocation(class_name: str, method_name: str, n_parameters: int) -> str:
    """``Owner.method(arg0, arg1, ...);``"""
    arguments = ", ".join(f"{ARG_NAME}{i}" for i in range(n_parameters))
    return f"{class_name}.{method_name}({arguments});"


def render_invoke_body(request: SubstitutionRequest, receiver_type: str) -> str:
    """Statements of ``invoke``: bind each argument, then call (and return)."""
    bound: list[str] = []
    if request.has_receiver:
        bound.append(_simple(receiver_type))
    bound.extend(request.parameter_types)

    lines = [extract_arg(i, clazz) for i, clazz in enumerate(bound)]
    call = extract_invocation(request.owner_simple_name, request.method_name, request.argument_count)
    if request.is_void:
        lines.append(f"{TAB_2}{call}")
        lines.append(f"{TAB_2}{NULL_RETURN}")
    else:
        lines.append(f"{TAB_2}return {call}")
    return "\n".join(lines)


def render_imports(request: SubstitutionRequest, config: GeneratorConfig) -> list[str]:
    """Runtime imports first, then the owning class.

    A class in the default package cannot be imported, so such an owner
    is left out.
    """
    imports: list[str] = []
    for name in [*config.runtime_imports, request.owner]:
        if _package_of(name) and name not in imports:
            imports.append(name)
    return [f"import {name};" for name in imports]


# ── Public API ──────────────────────────────────────────────────


def render_substitutor(
    request: SubstitutionRequest,
    config: GeneratorConfig | None = None,
    license_header: str = LICENSE_HEADER,
) -> GeneratedUnit:
    """Render the compilation unit for one substitution.

    Args:
        request:        The substitution to adapt.
        config:         Package and runtime type names (defaults if None).
        license_header: Comment block placed at the top of the unit.

    Returns:
        GeneratedUnit named ``<Owner>_<method>`` in the substitution package.
    """
    config = config or GeneratorConfig()
    name = request.class_name
    package = config.substitution_package

    parts = [license_header.rstrip("\n") + "\n"]
    if package:
        parts.append(f"package {package};\n")
    imports = render_imports(request, config)
    if imports:
        parts.append("\n".join(imports) + "\n")
    parts.append(
        _CLASS_TEMPLATE.format(
            owner=request.owner,
            name=name,
            base=_simple(config.substitutor_type),
            instance=INSTANCE_NAME,
            getter=GETTER,
            args=ARGS_NAME,
            body=render_invoke_body(request, config.receiver_type),
        )
    )

    return GeneratedUnit(
        class_name=name,
        qualified_name=f"{package}.{name}" if package else name,
        content="\n".join(parts),
        owner=request.owner,
        method_name=request.method_name,
        origin=request.origin,
    )
