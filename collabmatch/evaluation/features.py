"""Per-language idioms used by the language-feature evaluator.

Each entry lists declaration words, control-structure keywords, common
built-in calls and named regexes characteristic of one language.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_LANGUAGE = "JavaScript"


@dataclass(frozen=True)
class LanguageFeatures:
    functions: tuple[str, ...]
    keywords: tuple[str, ...]
    methods: tuple[str, ...]
    patterns: dict[str, re.Pattern[str]] = field(hash=False)
    structures: tuple[str, ...] = ()


def _patterns(**raw: str) -> dict[str, re.Pattern[str]]:
    return {name: re.compile(pattern) for name, pattern in raw.items()}


_JS_PATTERNS = dict(
    functionDeclaration=r"function\s+\w+\s*\([^)]*\)",
    arrowFunction=r"(?:const|let|var)\s+\w+\s*=\s*(?:\([^)]*\)|[^=]*)\s*=>",
    variableDeclaration=r"(?:const|let|var)\s+\w+",
    conditionals=r"\b(?:if|else if|else|switch)\b",
    loops=r"\b(?:for|while|do)\b",
    asyncAwait=r"\b(?:async|await)\b",
    tryCatch=r"\b(?:try|catch|finally)\b",
    classes=r"class\s+\w+",
    imports=r"\b(?:import|require)\b",
    exports=r"\b(?:export|module\.exports)\b",
)

LANGUAGE_FEATURES: dict[str, LanguageFeatures] = {
    "JavaScript": LanguageFeatures(
        functions=("function", "const", "let", "var", "arrow", "=>", "return", "async", "await"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break",
            "continue", "try", "catch", "throw",
        ),
        methods=(
            "map", "filter", "reduce", "forEach", "find", "findIndex", "some",
            "every", "includes", "push", "pop", "shift", "unshift", "slice",
            "splice", "concat", "join", "split", "toString", "parseInt",
            "parseFloat",
        ),
        patterns=_patterns(**_JS_PATTERNS),
        structures=("array", "object", "class", "module"),
    ),
    "Python": LanguageFeatures(
        functions=("def", "lambda", "return", "yield", "async", "await"),
        keywords=(
            "if", "elif", "else", "for", "while", "try", "except", "finally",
            "with", "import", "from", "as", "pass", "break", "continue", "raise",
        ),
        methods=(
            "print", "input", "len", "range", "enumerate", "zip", "map",
            "filter", "sorted", "reversed", "sum", "min", "max", "abs", "round",
            "isinstance", "type", "str", "int", "float", "list", "dict", "tuple",
            "set",
        ),
        patterns=_patterns(
            functionDeclaration=r"def\s+\w+\s*\([^)]*\)\s*:",
            lambdaFunction=r"lambda\s+[^:]+:",
            classDeclaration=r"class\s+\w+",
            conditionals=r"\b(?:if|elif|else)\b",
            loops=r"\b(?:for|while)\b",
            tryCatch=r"\b(?:try|except|finally)\b",
            imports=r"\b(?:import|from)\b",
            listComprehension=r"\[[^\]]+\s+for\s+[^\]]+\]",
            dictComprehension=r"\{[^}]+\s+for\s+[^}]+\}",
            decorators=r"@\w+",
        ),
        structures=("list", "dict", "tuple", "set", "class"),
    ),
    "Java": LanguageFeatures(
        functions=("public", "private", "protected", "static", "void", "return", "class", "interface"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break",
            "continue", "try", "catch", "finally", "throw", "throws", "new",
            "this", "super", "extends", "implements",
        ),
        methods=(
            "System.out.println", "System.out.print", "Scanner", "ArrayList",
            "HashMap", "HashSet", "String.valueOf", "Integer.parseInt",
            "Double.parseDouble", "Math.", "equals", "toString", "length",
            "size", "add", "remove", "get", "set", "contains",
        ),
        patterns=_patterns(
            classDeclaration=r"(?:public|private|protected)?\s*class\s+\w+",
            methodDeclaration=(
                r"(?:public|private|protected)\s+(?:static\s+)?[\w<>\[\]]+\s+\w+\s*\([^)]*\)"
            ),
            mainMethod=r"public\s+static\s+void\s+main\s*\(\s*String\[\]\s+\w+\s*\)",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            tryCatch=r"\b(?:try|catch|finally)\b",
            objectCreation=r"new\s+\w+\s*\(",
            imports=r"import\s+[\w.]+",
            interfaces=r"interface\s+\w+",
        ),
        structures=("class", "interface", "enum", "array", "ArrayList", "HashMap"),
    ),
    "C++": LanguageFeatures(
        functions=("int", "void", "char", "float", "double", "bool", "return", "class", "struct"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break",
            "continue", "try", "catch", "throw", "new", "delete", "const",
            "static", "public", "private", "protected",
        ),
        methods=(
            "cout", "cin", "printf", "scanf", "malloc", "free", "sizeof",
            "strlen", "strcpy", "strcmp", "vector", "push_back", "pop_back",
            "size", "clear", "sort", "find", "begin", "end",
        ),
        patterns=_patterns(
            functionDeclaration=r"(?:int|void|char|float|double|bool|string|auto)\s+\w+\s*\([^)]*\)",
            mainFunction=r"int\s+main\s*\([^)]*\)",
            classDeclaration=r"class\s+\w+",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            tryCatch=r"\b(?:try|catch)\b",
            includes=r"#include\s*[<\"][^>\"]+[>\"]",
            namespace=r"using\s+namespace\s+\w+",
            pointers=r"\w+\s*\*\s*\w+",
            references=r"\w+\s*&\s*\w+",
            templates=r"template\s*<[^>]+>",
        ),
        structures=("class", "struct", "array", "vector", "map", "set", "pair"),
    ),
    "C#": LanguageFeatures(
        functions=(
            "public", "private", "protected", "static", "void", "return",
            "class", "interface", "async", "await",
        ),
        keywords=(
            "if", "else", "for", "foreach", "while", "do", "switch", "case",
            "break", "continue", "try", "catch", "finally", "throw", "new",
            "this", "base", "using", "namespace",
        ),
        methods=(
            "Console.WriteLine", "Console.ReadLine", "String.Format", "int.Parse",
            "double.Parse", "List", "Dictionary", "Array", "LINQ", "ToString",
            "Add", "Remove", "Contains", "Count", "Length", "Where", "Select",
            "FirstOrDefault",
        ),
        patterns=_patterns(
            classDeclaration=r"(?:public|private|protected)?\s*class\s+\w+",
            methodDeclaration=(
                r"(?:public|private|protected)\s+(?:static\s+)?(?:async\s+)?"
                r"[\w<>\[\]]+\s+\w+\s*\([^)]*\)"
            ),
            mainMethod=r"static\s+void\s+Main\s*\([^)]*\)",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|foreach|while|do)\b",
            tryCatch=r"\b(?:try|catch|finally)\b",
            asyncAwait=r"\b(?:async|await)\b",
            usingStatements=r"using\s+[\w.]+",
            lambdaExpression=r"=>\s*(?:\{|[^;])",
            properties=r"(?:public|private|protected)\s+\w+\s+\w+\s*\{\s*get;",
        ),
        structures=("class", "interface", "struct", "enum", "List", "Dictionary", "Array"),
    ),
    "Go": LanguageFeatures(
        functions=("func", "return", "defer", "go", "chan", "interface", "struct"),
        keywords=(
            "if", "else", "for", "switch", "case", "break", "continue",
            "fallthrough", "goto", "range", "select", "var", "const", "type",
            "import", "package",
        ),
        methods=(
            "fmt.Println", "fmt.Printf", "fmt.Scanf", "len", "cap", "make",
            "append", "copy", "delete", "close", "panic", "recover",
        ),
        patterns=_patterns(
            functionDeclaration=r"func\s+(?:\w+\s+)?(\w+)\s*\([^)]*\)",
            mainFunction=r"func\s+main\s*\(\s*\)",
            structDeclaration=r"type\s+\w+\s+struct",
            interfaceDeclaration=r"type\s+\w+\s+interface",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\bfor\b",
            goroutines=r"\bgo\b\s+\w+",
            channels=r"\bchan\b",
            imports=r"import\s+(?:\([\s\S]*?\)|\"[^\"]+\")",
            defer=r"\bdefer\b",
        ),
        structures=("struct", "interface", "map", "slice", "array", "channel"),
    ),
    "Rust": LanguageFeatures(
        functions=("fn", "return", "impl", "trait", "struct", "enum", "async", "await"),
        keywords=(
            "if", "else", "for", "while", "loop", "match", "break", "continue",
            "return", "let", "mut", "const", "use", "mod", "pub", "impl",
            "trait", "struct", "enum",
        ),
        methods=(
            "println!", "print!", "format!", "vec!", "panic!", "assert!",
            "unwrap", "expect", "map", "filter", "collect", "iter", "push",
            "pop", "len", "is_empty", "to_string", "parse", "clone",
        ),
        patterns=_patterns(
            functionDeclaration=r"fn\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)",
            mainFunction=r"fn\s+main\s*\(\s*\)",
            structDeclaration=r"struct\s+\w+",
            enumDeclaration=r"enum\s+\w+",
            traitDeclaration=r"trait\s+\w+",
            implBlock=r"impl\s+(?:<[^>]+>)?\s*\w+",
            conditionals=r"\b(?:if|else if|else|match)\b",
            loops=r"\b(?:for|while|loop)\b",
            macros=r"\w+!",
            borrowing=r"&(?:mut\s+)?\w+",
            lifetimes=r"'[a-z]",
        ),
        structures=("struct", "enum", "trait", "Vec", "HashMap", "Option", "Result"),
    ),
    "TypeScript": LanguageFeatures(
        functions=(
            "function", "const", "let", "var", "arrow", "=>", "return", "async",
            "await", "type", "interface",
        ),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break",
            "continue", "try", "catch", "throw", "type", "interface", "enum",
            "namespace", "module",
        ),
        methods=(
            "console.log", "map", "filter", "reduce", "forEach", "find",
            "findIndex", "some", "every", "includes", "push", "pop", "shift",
            "unshift", "slice", "splice", "concat", "join", "split",
        ),
        patterns=_patterns(
            functionDeclaration=r"function\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)\s*:\s*\w+",
            arrowFunction=_JS_PATTERNS["arrowFunction"],
            typeAnnotation=(
                r":\s*(?:string|number|boolean|any|unknown|void|never|object"
                r"|\w+\[\]|Promise<\w+>)"
            ),
            interface=r"interface\s+\w+",
            typeAlias=r"type\s+\w+\s*=",
            genericTypes=r"<[^>]+>",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            asyncAwait=r"\b(?:async|await)\b",
            classes=r"class\s+\w+",
            enum=r"enum\s+\w+",
        ),
        structures=(
            "interface", "type", "class", "enum", "array", "object", "Promise",
            "Map", "Set",
        ),
    ),
    "PHP": LanguageFeatures(
        functions=("function", "return", "echo", "print", "class", "interface", "trait"),
        keywords=(
            "if", "else", "elseif", "for", "foreach", "while", "do", "switch",
            "case", "break", "continue", "try", "catch", "finally", "throw",
            "new", "use", "namespace", "const",
        ),
        methods=(
            "echo", "print", "var_dump", "print_r", "strlen", "strpos", "substr",
            "str_replace", "explode", "implode", "array_push", "array_pop",
            "count", "isset", "empty", "is_array", "json_encode", "json_decode",
        ),
        patterns=_patterns(
            phpTag=r"<\?php",
            functionDeclaration=r"function\s+\w+\s*\([^)]*\)",
            classDeclaration=r"class\s+\w+",
            conditionals=r"\b(?:if|elseif|else|switch)\b",
            loops=r"\b(?:for|foreach|while|do)\b",
            tryCatch=r"\b(?:try|catch|finally)\b",
            variables=r"\$\w+",
            echoOrPrint=r"\b(?:echo|print)\b",
            namespace=r"namespace\s+[\w\\]+",
            use=r"use\s+[\w\\]+",
        ),
        structures=("array", "class", "interface", "trait", "namespace"),
    ),
    "Ruby": LanguageFeatures(
        functions=("def", "return", "yield", "lambda", "proc", "class", "module"),
        keywords=(
            "if", "elsif", "else", "unless", "case", "when", "for", "while",
            "until", "loop", "break", "next", "redo", "rescue", "ensure",
            "raise", "begin", "end", "do",
        ),
        methods=(
            "puts", "print", "p", "gets", "chomp", "length", "size", "empty?",
            "include?", "map", "select", "reject", "each", "times", "upto",
            "downto", "push", "pop", "shift", "unshift", "join", "split",
        ),
        patterns=_patterns(
            methodDefinition=r"def\s+\w+(?:\([^)]*\))?",
            classDeclaration=r"class\s+\w+",
            moduleDeclaration=r"module\s+\w+",
            conditionals=r"\b(?:if|elsif|else|unless|case|when)\b",
            loops=r"\b(?:for|while|until|loop|each|times)\b",
            blocks=r"\bdo\b|\{[^}]*\}",
            symbols=r":\w+",
            stringInterpolation=r"#\{[^}]+\}",
            rescue=r"\b(?:begin|rescue|ensure|raise)\b",
        ),
        structures=("class", "module", "array", "hash", "symbol", "block"),
    ),
    "Swift": LanguageFeatures(
        functions=("func", "return", "class", "struct", "enum", "protocol", "extension", "init"),
        keywords=(
            "if", "else", "guard", "for", "while", "repeat", "switch", "case",
            "break", "continue", "fallthrough", "return", "let", "var", "in",
            "try", "catch", "throw", "defer",
        ),
        methods=(
            "print", "Array", "Dictionary", "Set", "map", "filter", "reduce",
            "forEach", "compactMap", "flatMap", "append", "remove", "count",
            "isEmpty", "first", "last", "contains",
        ),
        patterns=_patterns(
            functionDeclaration=r"func\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)",
            classDeclaration=r"class\s+\w+",
            structDeclaration=r"struct\s+\w+",
            enumDeclaration=r"enum\s+\w+",
            protocolDeclaration=r"protocol\s+\w+",
            conditionals=r"\b(?:if|else if|else|guard|switch)\b",
            loops=r"\b(?:for|while|repeat)\b",
            optionals=r"\?|!",
            closures=r"\{[^}]*in[^}]*\}",
            tryCatch=r"\b(?:try|catch|throw|defer)\b",
        ),
        structures=(
            "class", "struct", "enum", "protocol", "extension", "Array",
            "Dictionary", "Set", "Optional",
        ),
    ),
    "Kotlin": LanguageFeatures(
        functions=("fun", "return", "class", "interface", "object", "companion", "suspend"),
        keywords=(
            "if", "else", "when", "for", "while", "do", "break", "continue",
            "return", "val", "var", "in", "is", "as", "try", "catch", "finally",
            "throw",
        ),
        methods=(
            "println", "print", "readLine", "toInt", "toDouble", "toString",
            "listOf", "mutableListOf", "mapOf", "mutableMapOf", "setOf",
            "mutableSetOf", "map", "filter", "forEach", "any", "all", "none",
            "first", "last", "size",
        ),
        patterns=_patterns(
            functionDeclaration=r"fun\s+(?:<[^>]+>)?\s*\w+\s*\([^)]*\)",
            classDeclaration=r"(?:class|data class|sealed class)\s+\w+",
            objectDeclaration=r"object\s+\w+",
            conditionals=r"\b(?:if|else if|else|when)\b",
            loops=r"\b(?:for|while|do)\b",
            tryCatch=r"\b(?:try|catch|finally)\b",
            nullSafety=r"\?\.|\?:",
            lambdas=r"\{[^}]*->[^}]*\}",
            extensionFunction=r"fun\s+\w+\.\w+",
            coroutines=r"\b(?:suspend|launch|async|await)\b",
        ),
        structures=("class", "data class", "interface", "object", "List", "Map", "Set", "Array"),
    ),
    "C": LanguageFeatures(
        functions=("int", "void", "char", "float", "double", "return", "struct", "union", "typedef"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break",
            "continue", "goto", "return", "const", "static", "extern",
            "register", "auto", "sizeof",
        ),
        methods=(
            "printf", "scanf", "malloc", "calloc", "realloc", "free", "strlen",
            "strcpy", "strcmp", "strcat", "memcpy", "memset", "fopen", "fclose",
            "fprintf", "fscanf", "fgets", "fputs",
        ),
        patterns=_patterns(
            functionDeclaration=r"(?:int|void|char|float|double|struct\s+\w+|\w+\*)\s+\w+\s*\([^)]*\)",
            mainFunction=r"int\s+main\s*\([^)]*\)",
            structDeclaration=r"struct\s+\w+\s*\{",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            includes=r"#include\s*[<\"][^>\"]+[>\"]",
            define=r"#define\s+\w+",
            pointers=r"\w+\s*\*+\s*\w+",
            arrays=r"\w+\s+\w+\s*\[[^\]]*\]",
        ),
        structures=("struct", "union", "enum", "array", "pointer"),
    ),
}

# Comment syntaxes: C-style line and block, hash, docstrings, HTML
COMMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"//.*"),
    re.compile(r"/\*[\s\S]*?\*/"),
    re.compile(r"#.*"),
    re.compile(r'""".+?"""', re.DOTALL),
    re.compile(r"'''.+?'''", re.DOTALL),
    re.compile(r"<!--[\s\S]*?-->"),
)

# (pattern, weight, label)
COMPLEXITY_INDICATORS: tuple[tuple[re.Pattern[str], int, str], ...] = (
    (re.compile(r"\bclass\b", re.IGNORECASE), 3, "classes"),
    (re.compile(r"\binterface\b", re.IGNORECASE), 2, "interfaces"),
    (re.compile(r"\basync\b", re.IGNORECASE), 2, "async operations"),
    (re.compile(r"\btry\b", re.IGNORECASE), 2, "error handling"),
    (re.compile(r"\bimport\b|\brequire\b|\buse\b", re.IGNORECASE), 1, "imports"),
    (re.compile(r"\breturn\b", re.IGNORECASE), 1, "return statements"),
)


def get_language_features(language_name: str | None) -> LanguageFeatures:
    """Feature table for a language; unknown names use the JavaScript table."""
    if language_name and language_name in LANGUAGE_FEATURES:
        return LANGUAGE_FEATURES[language_name]
    return LANGUAGE_FEATURES[DEFAULT_LANGUAGE]


def supported_languages() -> list[str]:
    return sorted(LANGUAGE_FEATURES)
