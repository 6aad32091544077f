"""Built-in vulnerability rules and the global safe-pattern list."""

from __future__ import annotations

from dataclasses import dataclass

from secscan.rules.models import RuleDatabase, RuleDatabaseBuilder, Severity
from secscan.scanner.languages import ALL_LANGUAGES

_ALL = (ALL_LANGUAGES,)
_PY = ("python",)
_JS = ("javascript", "typescript", "vue", "ejs")
_JAVA = ("java", "kotlin")
_CS = ("csharp",)
_PHP = ("php",)
_PS = ("powershell",)
_IOS = ("swift", "objc")

# Cross-language idioms that mark surrounding code as guarded: ownership and
# authorization checks, defensive guards, parameterised queries.
DEFAULT_SAFE_PATTERNS: tuple[str, ...] = (
    # C# / .NET
    r"\.Where\(.*UserId\s*==.*\)",
    r"\.Where\(.*OwnerId\s*==.*\)",
    r"\[Authorize\]",
    r"GetCurrentUserId\(\)",
    r"CheckOwnership\(",
    r"ValidateAccess\(",
    r"protector\.Protect\(",
    r"IDataProtector",
    r"Guid\.NewGuid\(\)",
    r"\.Parameters\.Add(?:WithValue)?\(",
    # PHP
    r"session_id\(\)",
    r"""\$_SESSION\[['"]user_id['"]\]""",
    r"current_user_id\(\)",
    r"check_ownership\(",
    r"user_can_access\(",
    r"->bind_param\(",
    r"->bindParam\(",
    # Java
    r"getCurrentUser\(\)",
    r"SecurityContextHolder\.getContext\(\)",
    r"@PreAuthorize",
    r"@Secured",
    r"hasRole\(",
    r"UUID\.randomUUID\(\)",
    r"\.setString\(\s*\d+\s*,",
    # Python
    r"request\.user\.id",
    r"current_user\.id",
    r"@login_required",
    r"@permission_required",
    r"user\.has_perm\(",
    # JavaScript / Node.js
    r"req\.user\.id",
    r"passport\.authenticate",
    r"isAuthenticated\(",
    r"checkOwnership\(",
    r"uuid\.v4\(\)",
    # PowerShell
    r"ValidateSet\(",
    r"Parameter\(Mandatory=\$true\)",
    r"-ErrorAction\s+(?:Stop|SilentlyContinue)",
    r"Test-Path\s",
    r"if\s*\(\s*-not\s",
    r"try\s*\{.*catch",
    r"-WhatIf",
    r"-Confirm",
)


@dataclass(frozen=True)
class _Pattern:
    regex: str
    severity: Severity
    languages: tuple[str, ...] = _ALL
    description: str = ""
    cwe_id: str | None = None


@dataclass(frozen=True)
class _RuleDef:
    category: str
    severity: Severity
    cwe_id: str
    recommendation: str
    patterns: tuple[_Pattern, ...]
    whitelist: tuple[str, ...] = ()


_RULES: tuple[_RuleDef, ...] = (
    _RuleDef(
        category="SQL Injection",
        severity=Severity.HIGH,
        cwe_id="CWE-89",
        recommendation="Use parameterized queries and input validation",
        whitelist=(
            r"PreparedStatement",
            r"SqlParameter",
            r"""cursor\.execute\(\s*["'][^"']*%s[^"']*["']\s*,""",
        ),
        patterns=(
            _Pattern(
                r"""["'](?:SELECT|INSERT|UPDATE|DELETE)\b[^"'\n]*["']\s*\+\s*\w+""",
                Severity.HIGH,
                description="SQL statement built by string concatenation",
            ),
            _Pattern(
                r"""\b(?:execute|executemany|raw)\s*\(\s*f["'](?:SELECT|INSERT|UPDATE|DELETE)\b""",
                Severity.CRITICAL,
                _PY,
                "SQL statement built with an f-string",
            ),
            _Pattern(
                r"""\.(?:execute|executemany)\s*\(\s*["'][^"'\n]*["']\s*%\s*[\w(]""",
                Severity.HIGH,
                _PY,
                "SQL statement built with %-formatting",
            ),
            _Pattern(
                r"""\.(?:execute|query)\s*\(\s*["'][^"'\n]*["']\s*\.format\(""",
                Severity.HIGH,
                _PY,
                "SQL statement built with str.format()",
            ),
            _Pattern(
                r"\b(?:mysql_query|mysqli_query|pg_query)\s*\([^)\n]*\$_(?:GET|POST|REQUEST|COOKIE)",
                Severity.CRITICAL,
                _PHP,
                "Request data passed directly to a database query",
            ),
            _Pattern(
                r'String\.Format\s*\(\s*"(?:SELECT|INSERT|UPDATE|DELETE)\b',
                Severity.HIGH,
                _CS,
                "SQL statement built with String.Format",
            ),
            _Pattern(
                r"""createStatement\(\)\s*\.\s*execute(?:Query|Update)?\s*\(\s*[^"'\s)]""",
                Severity.HIGH,
                _JAVA,
                "Dynamic SQL passed to java.sql.Statement",
            ),
        ),
    ),
    _RuleDef(
        category="Cross-Site Scripting (XSS)",
        severity=Severity.MEDIUM,
        cwe_id="CWE-79",
        recommendation="Encode output and validate input",
        whitelist=(
            r"DOMPurify\.sanitize",
            r"htmlspecialchars\(",
            r"htmlentities\(",
            r"escapeHtml\(",
            r"HtmlEncoder",
            r"bleach\.clean\(",
        ),
        patterns=(
            _Pattern(
                r"""\.(?:innerHTML|outerHTML)\s*=\s*[^;"'`\n]*\w""",
                Severity.HIGH,
                _JS + ("html",),
                "Untrusted data assigned to innerHTML/outerHTML",
            ),
            _Pattern(
                r"\bdocument\.write(?:ln)?\s*\(",
                Severity.MEDIUM,
                _JS + ("html",),
                "document.write() with dynamic content",
            ),
            _Pattern(
                r"dangerouslySetInnerHTML",
                Severity.MEDIUM,
                _JS,
                "React dangerouslySetInnerHTML bypasses escaping",
            ),
            _Pattern(
                r"\b(?:echo|print)\s+\$_(?:GET|POST|REQUEST|COOKIE)\b",
                Severity.HIGH,
                _PHP,
                "Request data echoed without encoding",
            ),
            _Pattern(
                r"@Html\.Raw\s*\(",
                Severity.MEDIUM,
                _CS,
                "Html.Raw renders unencoded markup",
            ),
            _Pattern(
                r"\bmark_safe\s*\(",
                Severity.MEDIUM,
                _PY,
                "mark_safe() disables template auto-escaping",
            ),
            _Pattern(
                r"\{\{[^}\n]*\|\s*safe\s*\}\}",
                Severity.MEDIUM,
                ("html", "python"),
                "Template output marked safe",
            ),
        ),
    ),
    _RuleDef(
        category="Command Injection",
        severity=Severity.HIGH,
        cwe_id="CWE-78",
        recommendation="Avoid shell invocation; pass arguments as a list and validate input",
        whitelist=(
            r"shlex\.quote\(",
            r"escapeshellarg\(",
            r"escapeshellcmd\(",
        ),
        patterns=(
            _Pattern(
                r"\bos\.(?:system|popen)\s*\(",
                Severity.HIGH,
                _PY,
                "Shell command executed through os.system/os.popen",
            ),
            _Pattern(
                r"\bsubprocess\.\w+\([^)\n]*shell\s*=\s*True",
                Severity.CRITICAL,
                _PY,
                "subprocess call with shell=True",
            ),
            _Pattern(
                r"""\bexec(?:Sync)?\s*\(\s*(?:`[^`\n]*\$\{|["'][^"'\n]*["']\s*\+)""",
                Severity.CRITICAL,
                _JS,
                "child_process exec with interpolated input",
            ),
            _Pattern(
                r"Runtime\.getRuntime\(\)\.exec\s*\(",
                Severity.HIGH,
                _JAVA,
                "Runtime.exec() invocation",
            ),
            _Pattern(
                r"\b(?:shell_exec|system|passthru|exec|popen)\s*\([^)\n]*\$_(?:GET|POST|REQUEST|COOKIE)",
                Severity.CRITICAL,
                _PHP,
                "Request data passed to a shell command",
            ),
            _Pattern(
                r"Process\.Start\s*\(",
                Severity.MEDIUM,
                _CS,
                "Process.Start() invocation",
            ),
            _Pattern(
                r'exec\.Command\s*\(\s*"(?:sh|bash|cmd(?:\.exe)?)"',
                Severity.HIGH,
                ("golang",),
                "Command run through a shell interpreter",
            ),
        ),
    ),
    _RuleDef(
        category="Path Traversal",
        severity=Severity.HIGH,
        cwe_id="CWE-22",
        recommendation="Validate and sanitize file paths",
        whitelist=(
            r"os\.path\.basename\(",
            r"\brealpath\(",
            r"path\.basename\(",
            r"Path\.GetFileName\(",
            r"getCanonicalPath\(",
            r"secure_filename\(",
        ),
        patterns=(
            _Pattern(
                r"\bopen\s*\(\s*(?:request\.|os\.path\.join\s*\([^)\n]*request\.)",
                Severity.HIGH,
                _PY,
                "File opened with a request-controlled path",
            ),
            _Pattern(
                r"(?:readFile|readFileSync|createReadStream|sendFile)\s*\([^)\n]*req\.(?:params|query|body)",
                Severity.HIGH,
                _JS,
                "File read with a request-controlled path",
            ),
            _Pattern(
                r"new\s+File\s*\([^)\n]*request\.getParameter",
                Severity.HIGH,
                _JAVA,
                "File created from a request parameter",
            ),
            _Pattern(
                r"\b(?:include|require)(?:_once)?\s*\(?\s*\$_(?:GET|POST|REQUEST|COOKIE)",
                Severity.CRITICAL,
                _PHP,
                "File inclusion from request data",
            ),
            _Pattern(
                r"File\.(?:ReadAll\w*|Open\w*)\s*\([^)\n]*Request\.",
                Severity.HIGH,
                _CS,
                "File read with a request-controlled path",
            ),
        ),
    ),
    _RuleDef(
        category="Open Redirect",
        severity=Severity.MEDIUM,
        cwe_id="CWE-601",
        recommendation="Validate redirect URLs against whitelist",
        whitelist=(
            r"Url\.IsLocalUrl\(",
            r"is_safe_url\(",
            r"url_has_allowed_host_and_scheme\(",
            r"allowed_?redirects",
        ),
        patterns=(
            _Pattern(
                r"\bredirect\s*\(\s*request\.(?:GET|POST|args|values|form)",
                Severity.MEDIUM,
                _PY,
                "Redirect target taken from the request",
            ),
            _Pattern(
                r"\bres\.redirect\s*\(\s*req\.(?:query|params|body)",
                Severity.MEDIUM,
                _JS,
                "Redirect target taken from the request",
            ),
            _Pattern(
                r"""header\s*\(\s*["']Location:[^"'\n]*["']\s*\.\s*\$_(?:GET|POST|REQUEST)""",
                Severity.MEDIUM,
                _PHP,
                "Location header built from request data",
            ),
            _Pattern(
                r"sendRedirect\s*\(\s*request\.getParameter",
                Severity.MEDIUM,
                _JAVA,
                "Redirect target taken from a request parameter",
            ),
            _Pattern(
                r"\bRedirect\s*\(\s*Request\.(?:Query|Form)",
                Severity.MEDIUM,
                _CS,
                "Redirect target taken from the request",
            ),
        ),
    ),
    _RuleDef(
        category="Sensitive Information Exposure",
        severity=Severity.HIGH,
        cwe_id="CWE-798",
        recommendation="Remove hardcoded sensitive data",
        whitelist=(
            r"os\.environ",
            r"getenv\(",
            r"process\.env\.",
            r"Environment\.GetEnvironmentVariable",
            r"changeme",
        ),
        patterns=(
            _Pattern(
                r"""\b(?:password|passwd|pwd)\s*[:=]\s*["'][^"'\s]{4,}["']""",
                Severity.HIGH,
                description="Hardcoded password",
            ),
            _Pattern(
                r"""\b(?:api[_-]?key|secret[_-]?key|access[_-]?token|auth[_-]?token)\s*[:=]\s*["'][a-z0-9_\-]{16,}["']""",
                Severity.HIGH,
                description="Hardcoded API key or token",
            ),
            _Pattern(
                r"\bAKIA[0-9A-Z]{16}\b",
                Severity.CRITICAL,
                description="AWS access key id",
            ),
            _Pattern(
                r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----",
                Severity.CRITICAL,
                description="Embedded private key",
            ),
            _Pattern(
                r"DefaultEndpointsProtocol=https?;AccountName=[^;\s]+;AccountKey=[^;\s]+",
                Severity.CRITICAL,
                description="Azure storage connection string",
            ),
        ),
    ),
    _RuleDef(
        category="Weak Cryptography",
        severity=Severity.MEDIUM,
        cwe_id="CWE-327",
        recommendation="Use modern algorithms (SHA-256 or better, AES-GCM) from a vetted library",
        whitelist=(r"usedforsecurity\s*=\s*False",),
        patterns=(
            _Pattern(
                r"\bhashlib\.(?:md5|sha1)\s*\(",
                Severity.MEDIUM,
                _PY,
                "MD5/SHA-1 used for hashing",
            ),
            _Pattern(
                r"""createHash\s*\(\s*["'](?:md5|sha1)["']""",
                Severity.MEDIUM,
                _JS,
                "MD5/SHA-1 used for hashing",
            ),
            _Pattern(
                r'MessageDigest\.getInstance\s*\(\s*"(?:MD5|SHA-?1)"',
                Severity.MEDIUM,
                _JAVA,
                "MD5/SHA-1 used for hashing",
            ),
            _Pattern(
                r'Cipher\.getInstance\s*\(\s*"(?:DES|DESede|RC4|AES/ECB)',
                Severity.HIGH,
                _JAVA,
                "Weak cipher or ECB mode",
            ),
            _Pattern(
                r"\b(?:MD5|SHA1|DES|TripleDES)(?:CryptoServiceProvider)?\.Create\s*\(",
                Severity.MEDIUM,
                _CS,
                "Weak hash or cipher primitive",
            ),
            _Pattern(
                r"\b(?:md5|sha1)\s*\(\s*\$",
                Severity.MEDIUM,
                _PHP,
                "MD5/SHA-1 used for hashing",
            ),
        ),
    ),
    _RuleDef(
        category="Insecure Deserialization",
        severity=Severity.HIGH,
        cwe_id="CWE-502",
        recommendation="Never deserialize untrusted data; use safe loaders or data-only formats",
        whitelist=(r"SafeLoader", r"safe_load\("),
        patterns=(
            _Pattern(r"\bpickle\.loads?\s*\(", Severity.HIGH, _PY, "pickle deserialization"),
            _Pattern(r"\byaml\.load\s*\(", Severity.MEDIUM, _PY, "yaml.load without SafeLoader"),
            _Pattern(
                r"\bunserialize\s*\(\s*\$_(?:GET|POST|REQUEST|COOKIE)",
                Severity.CRITICAL,
                _PHP,
                "unserialize() on request data",
            ),
            _Pattern(r"new\s+BinaryFormatter\s*\(", Severity.HIGH, _CS, "BinaryFormatter usage"),
            _Pattern(
                r"TypeNameHandling\s*=\s*TypeNameHandling\.(?:All|Auto|Objects)",
                Severity.HIGH,
                _CS,
                "Json.NET polymorphic type handling enabled",
            ),
            _Pattern(
                r"new\s+ObjectInputStream\s*\(",
                Severity.MEDIUM,
                _JAVA,
                "Java native deserialization",
            ),
            _Pattern(r"\bMarshal\.load\s*\(", Severity.HIGH, ("ruby",), "Marshal.load usage"),
        ),
    ),
    _RuleDef(
        category="Insecure Direct Object Reference",
        severity=Severity.MEDIUM,
        cwe_id="CWE-639",
        recommendation="Verify the current user owns or may access the requested object",
        patterns=(
            _Pattern(
                r"\.(?:Find|FindAsync|FirstOrDefault|SingleOrDefault)\s*\(\s*id\s*\)",
                Severity.MEDIUM,
                _CS,
                "Entity loaded by id without an ownership check",
            ),
            _Pattern(
                r"\.objects\.get\s*\(\s*(?:pk|id)\s*=\s*\w+\s*\)",
                Severity.MEDIUM,
                _PY,
                "Model loaded by id without an ownership check",
            ),
            _Pattern(
                r"\bfindById\s*\(\s*req\.params\.\w+\s*\)",
                Severity.MEDIUM,
                _JS,
                "Record loaded by request id without an ownership check",
            ),
            _Pattern(
                r"\.findById\s*\(\s*\w+\s*\)",
                Severity.LOW,
                _JAVA,
                "Repository lookup by id without an ownership check",
            ),
            _Pattern(
                r"""WHERE\s+id\s*=\s*["']?\s*\.\s*\$_(?:GET|POST|REQUEST)""",
                Severity.HIGH,
                _PHP,
                "Row selected by request id",
            ),
        ),
    ),
    _RuleDef(
        category="Cross-Site Request Forgery (CSRF)",
        severity=Severity.MEDIUM,
        cwe_id="CWE-352",
        recommendation="Implement CSRF tokens and same-origin checks",
        patterns=(
            _Pattern(r"@csrf_exempt", Severity.MEDIUM, _PY, "View exempted from CSRF protection"),
            _Pattern(
                r"WTF_CSRF_ENABLED\s*=\s*False",
                Severity.HIGH,
                _PY,
                "Flask-WTF CSRF protection disabled",
            ),
            _Pattern(
                r"\[IgnoreAntiforgeryToken\]",
                Severity.MEDIUM,
                _CS,
                "Action exempted from antiforgery validation",
            ),
            _Pattern(
                r"\.csrf\s*\(\s*\)\s*\.disable\s*\(\s*\)|csrf\s*\(\s*\w+\s*->\s*\w+\.disable\s*\(\s*\)\s*\)",
                Severity.HIGH,
                _JAVA,
                "Spring Security CSRF protection disabled",
            ),
        ),
    ),
    _RuleDef(
        category="Network Security",
        severity=Severity.MEDIUM,
        cwe_id="CWE-295",
        recommendation="Use HTTPS and validate certificates",
        patterns=(
            _Pattern(
                r"\bverify\s*=\s*False\b",
                Severity.HIGH,
                _PY,
                "TLS certificate verification disabled",
            ),
            _Pattern(
                r"rejectUnauthorized\s*:\s*false",
                Severity.HIGH,
                _JS,
                "TLS certificate verification disabled",
            ),
            _Pattern(
                r"""NODE_TLS_REJECT_UNAUTHORIZED\s*=\s*["']?0""",
                Severity.HIGH,
                _JS,
                "TLS certificate verification disabled process-wide",
            ),
            _Pattern(
                r"ServerCertificateValidationCallback\s*=[^;\n]*=>\s*true",
                Severity.HIGH,
                _CS,
                "Certificate validation callback always succeeds",
            ),
            _Pattern(
                r"InsecureSkipVerify\s*:\s*true",
                Severity.HIGH,
                ("golang",),
                "TLS certificate verification disabled",
            ),
            _Pattern(
                r"""["']http://(?!localhost|127\.0\.0\.1|0\.0\.0\.0|www\.w3\.org|schemas\.|example\.com)[^"'\s]+["']""",
                Severity.LOW,
                description="Cleartext HTTP endpoint",
                cwe_id="CWE-319",
            ),
        ),
    ),
    _RuleDef(
        category="PowerShell Execution",
        severity=Severity.HIGH,
        cwe_id="CWE-78",
        recommendation="Validate input and use safe PowerShell practices",
        patterns=(
            _Pattern(
                r"\bInvoke-Expression\b",
                Severity.HIGH,
                _PS,
                "Invoke-Expression evaluates arbitrary strings",
            ),
            _Pattern(r"\biex\s+[$(]", Severity.HIGH, _PS, "iex alias evaluates arbitrary strings"),
            _Pattern(
                r"\[ScriptBlock\]::Create\s*\(",
                Severity.HIGH,
                _PS,
                "Script block created from a string",
            ),
            _Pattern(
                r"\.DownloadString\s*\(",
                Severity.HIGH,
                _PS,
                "Remote script downloaded into memory",
            ),
            _Pattern(
                r"\bStart-Process\b[^\n]*\$\w+",
                Severity.MEDIUM,
                _PS,
                "Process started with variable arguments",
            ),
            _Pattern(
                r"-ExecutionPolicy\s+(?:Bypass|Unrestricted)",
                Severity.MEDIUM,
                _PS,
                "Execution policy bypassed",
            ),
        ),
    ),
    _RuleDef(
        category="PowerShell Input Validation",
        severity=Severity.MEDIUM,
        cwe_id="CWE-20",
        recommendation="Validate input and use safe PowerShell practices",
        whitelist=(r"ValidatePattern\(", r"ValidateScript\("),
        patterns=(
            _Pattern(r"\bRead-Host\b", Severity.LOW, _PS, "Unvalidated interactive input"),
            _Pattern(r"\$args\[\d+\]", Severity.LOW, _PS, "Unvalidated positional argument"),
            _Pattern(
                r"ConvertTo-SecureString\b[^\n]*-AsPlainText",
                Severity.HIGH,
                _PS,
                "Secure string built from plain text",
                "CWE-798",
            ),
        ),
    ),
    _RuleDef(
        category="Android Intent and WebView",
        severity=Severity.MEDIUM,
        cwe_id="CWE-749",
        recommendation="Follow Android security best practices",
        patterns=(
            _Pattern(
                r"setJavaScriptEnabled\s*\(\s*true\s*\)",
                Severity.MEDIUM,
                _JAVA,
                "JavaScript enabled in WebView",
            ),
            _Pattern(
                r"addJavascriptInterface\s*\(",
                Severity.HIGH,
                _JAVA,
                "Java object exposed to WebView JavaScript",
            ),
            _Pattern(
                r"setAllowFileAccess(?:FromFileURLs)?\s*\(\s*true\s*\)",
                Severity.MEDIUM,
                _JAVA,
                "WebView file access enabled",
            ),
            _Pattern(
                r"loadUrl\s*\(\s*getIntent\(\)",
                Severity.HIGH,
                _JAVA,
                "WebView loads a URL taken from an Intent",
            ),
        ),
    ),
    _RuleDef(
        category="Android Component Export",
        severity=Severity.MEDIUM,
        cwe_id="CWE-926",
        recommendation="Follow Android security best practices",
        whitelist=(r"android:permission\s*=",),
        patterns=(
            _Pattern(
                r'android:exported\s*=\s*"true"',
                Severity.MEDIUM,
                ("xml",),
                "Component exported without a permission",
            ),
        ),
    ),
    _RuleDef(
        category="iOS Network Security",
        severity=Severity.HIGH,
        cwe_id="CWE-319",
        recommendation="Follow iOS security best practices",
        patterns=(
            _Pattern(
                r"<key>NSAllowsArbitraryLoads</key>\s*<true\s*/>",
                Severity.HIGH,
                ("plist", "xml"),
                "App Transport Security disabled",
            ),
            _Pattern(
                r"NSExceptionAllowsInsecureHTTPLoads",
                Severity.MEDIUM,
                ("plist", "xml"),
                "Insecure HTTP loads allowed for a domain",
            ),
        ),
    ),
    _RuleDef(
        category="iOS Data Storage",
        severity=Severity.HIGH,
        cwe_id="CWE-312",
        recommendation="Follow iOS security best practices",
        whitelist=(r"Keychain",),
        patterns=(
            _Pattern(
                r"(?:UserDefaults\.standard|NSUserDefaults)[^\n]*(?:password|token|secret)",
                Severity.HIGH,
                _IOS,
                "Secret stored in user defaults",
            ),
        ),
    ),
    _RuleDef(
        category="iOS WebView Security",
        severity=Severity.MEDIUM,
        cwe_id="CWE-749",
        recommendation="Follow iOS security best practices",
        patterns=(
            _Pattern(r"\bUIWebView\b", Severity.MEDIUM, _IOS, "Deprecated UIWebView usage"),
        ),
    ),
)


def builtin_rules() -> RuleDatabase:
    """Build the compiled-in rule database."""
    builder = RuleDatabaseBuilder(source="builtin")
    for rule in _RULES:
        languages = sorted({lang for p in rule.patterns for lang in p.languages})
        builder.add_rule(
            rule.category,
            severity=rule.severity,
            cwe_id=rule.cwe_id,
            languages=languages,
            whitelist=rule.whitelist,
        )
        for p in rule.patterns:
            builder.add_pattern(
                rule.category,
                p.regex,
                severity=p.severity,
                cwe_id=p.cwe_id,
                description=p.description,
                recommendation=rule.recommendation,
                languages=p.languages,
            )
    builder.set_safe_patterns(DEFAULT_SAFE_PATTERNS)
    return builder.build()
