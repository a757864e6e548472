from __future__ import annotations

"""
Domain Constants.

Centralizes the directive vocabulary, node-kind filters, and the fixed
defaults shared by the verification pipeline and the interface layers.
"""

from typing import Dict, FrozenSet

APP_NAME = "annocheck"
APP_VERSION = "0.1.0"
DEFAULT_CONFIG_FILE = "annocheck.json"
GROUP_DESCRIPTOR_FILE = "test.json"

# -----------------------------------------------------------------------------
# DIRECTIVE VOCABULARY
# -----------------------------------------------------------------------------

DIRECTIVE_DEFINITION = "DEF"
DIRECTIVE_TYPE = "TYPE"
DIRECTIVE_HAS_PROPS = "HAS_PROPS"

LOCALITY_LOCAL = "local"
LOCALITY_NONLOCAL = "nonlocal"

# Verbosity handed to the engine when stringifying an inferred type
TYPE_VERBOSITY = 1

# Node kinds each directive may anchor to
DEFINITION_ANCHOR_KINDS: FrozenSet[str] = frozenset(
    {"Identifier", "Literal", "FunctionExpression"}
)
EXPRESSION_ANCHOR_KINDS: FrozenSet[str] = frozenset({"Identifier", "ThisExpression"})

# -----------------------------------------------------------------------------
# GROUP DESCRIPTOR
# -----------------------------------------------------------------------------

VENDOR_PLACEHOLDER = "$(VENDOR)"
DEFINITION_FILE_SUFFIX = ".json"
PLUGIN_FILE_SUFFIX = ".py"

# -----------------------------------------------------------------------------
# SYNTAX KIND MAPPING (tree-sitter type -> ESTree-style kind)
# -----------------------------------------------------------------------------

NODE_KIND_MAP: Dict[str, str] = {
    "program": "Program",
    "comment": "Comment",
    "identifier": "Identifier",
    "property_identifier": "Identifier",
    "shorthand_property_identifier": "Identifier",
    "shorthand_property_identifier_pattern": "Identifier",
    "this": "ThisExpression",
    "number": "Literal",
    "string": "Literal",
    "template_string": "Literal",
    "regex": "Literal",
    "true": "Literal",
    "false": "Literal",
    "null": "Literal",
    "undefined": "Literal",
    "function": "FunctionExpression",
    "function_expression": "FunctionExpression",
    "arrow_function": "ArrowFunctionExpression",
    "function_declaration": "FunctionDeclaration",
    "object": "ObjectExpression",
    "array": "ArrayExpression",
    "pair": "Property",
    "member_expression": "MemberExpression",
    "subscript_expression": "MemberExpression",
    "call_expression": "CallExpression",
    "new_expression": "NewExpression",
    "assignment_expression": "AssignmentExpression",
    "augmented_assignment_expression": "AssignmentExpression",
    "binary_expression": "BinaryExpression",
    "unary_expression": "UnaryExpression",
    "update_expression": "UpdateExpression",
    "ternary_expression": "ConditionalExpression",
    "parenthesized_expression": "ParenthesizedExpression",
    "sequence_expression": "SequenceExpression",
    "variable_declaration": "VariableDeclaration",
    "lexical_declaration": "VariableDeclaration",
    "variable_declarator": "VariableDeclarator",
    "expression_statement": "ExpressionStatement",
    "statement_block": "BlockStatement",
    "return_statement": "ReturnStatement",
    "formal_parameters": "FormalParameters",
}

# Kinds that denote a value-producing expression
EXPRESSION_KINDS: FrozenSet[str] = frozenset(
    {
        "Identifier",
        "ThisExpression",
        "Literal",
        "FunctionExpression",
        "ArrowFunctionExpression",
        "ObjectExpression",
        "ArrayExpression",
        "MemberExpression",
        "CallExpression",
        "NewExpression",
        "AssignmentExpression",
        "BinaryExpression",
        "UnaryExpression",
        "UpdateExpression",
        "ConditionalExpression",
        "ParenthesizedExpression",
        "SequenceExpression",
    }
)
