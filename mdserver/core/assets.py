"""
Inline assets embedded in every page: the default style sheet and the
table-of-contents script. Both are pinned in the Content-Security-Policy by
their hashes, so rendered pages must embed them byte for byte.

The table-of-contents script is a modified version of
https://github.com/matthewkastor/html-table-of-contents (GPL-3.0).
"""

TOC_SCRIPT = """
document.addEventListener('DOMContentLoaded', function() {
	htmlTableOfContents();
} );
function htmlTableOfContents( documentRef ) {
	var documentRef = documentRef || document;
	var toc = documentRef.getElementById("toc");
	var headings = [].slice.call(documentRef.body.querySelectorAll('article h1, article h2, article h3, article h4, article h5, article h6'));
	if (headings.length < 2) { return };
	headings.forEach(function (heading, index) {
		var ref = heading.getAttribute( "id" );
		var link = documentRef.createElement( "a" );
		link.setAttribute( "href", "#"+ ref );
		link.textContent = heading.textContent;
		var li = documentRef.createElement( "li" );
		li.setAttribute( "class", heading.tagName.toLowerCase() );
		li.appendChild( link );
		toc.appendChild( li );
	});
}
"""

DEFAULT_STYLE = """body {
	font-family: Charter, Constantia, serif;
	font-size: 1rem;
	line-height: 170%;
	max-width: 45em;
	margin: auto;
	padding-right: 1em;
	padding-left: 1em;
	color: #333;
	background: white;
	text-rendering: optimizeLegibility;
}

@media only screen and (max-width: 480px) {
	body {
		font-size: 125%;
		text-rendering: auto;
	}
}

a {color: #a08941; text-decoration: none;}
a:hover {color: #c6b754; text-decoration: underline;}

h1 a, h2 a, h3 a, h4 a, h5 a {
	text-decoration: none;
	color: gray;
	break-after: avoid;
}
h1 a:hover, h2 a:hover, h3 a:hover, h4 a:hover, h5 a:hover {
	text-decoration: none;
	color: gray;
}
h1, h2, h3, h4, h5 {
	font-weight: bold;
	color: gray;
}

h1 {
	font-size: 150%;
}

h2 {
	font-size: 130%;
}

h3 {
	font-size: 110%;
}

h4, h5 {
	font-size: 100%;
	font-style: italic;
}

pre {
	background-color: rgba(200,200,200,0.2);
	color: #111;
	padding: 0.5em;
	overflow: auto;
}
code, pre {
	font-family: Consolas, "PT Mono", monospace;
}
pre { font-size: 90%; }

hr { border:none; text-align:center; color:gray; }
hr:after {
	content:"\\2766";
	display:inline-block;
	font-size:1.5em;
}

dt code {
	font-weight: bold;
}
dd p {
	margin-top: 0;
}

blockquote {
	background-color: rgba(200,200,200,0.2);
	color: #111;
	padding: 0 0.5em;
}

img {display:block;margin:auto;max-width:100%}

table, td, th {
	border:thin solid lightgrey;
	border-collapse:collapse;
	vertical-align:middle;
}
td, th {padding:0.2em 0.5em}
tr:nth-child(even) {background-color: rgba(200,200,200,0.2)}

ul#toc:not(:empty):before { content:"Contents:"; font-weight:bold; color:gray }
ul#toc:not(:empty):after {
	content:"\\2042";
	text-align:center;
	display:block;
	color:gray;
}
ul#toc {list-style: none;padding-left:0}
ul#toc li.h2 {padding-left:1em}
ul#toc li.h3 {padding-left:2em}
ul#toc li.h4 {padding-left:3em}
ul#toc li.h5 {padding-left:4em}
ul#toc li.h6 {padding-left:5em}

nav {
	font-size:90%;
	text-align:right;
	padding:.5em;
	border-bottom: 1px solid gray;
}

@media print {
	nav, ul#toc {display: none}
	pre {overflow-wrap:break-word; white-space:pre-wrap}
}"""
