"""Backend for the mdserve markdown file server.

Route handlers in server.py stay thin; this package holds:
- request path resolution under the served directory
- markdown rendering + HTML sanitization
- the mtime-keyed render cache and the request pipeline around it

Security note:
Request paths are canonicalized and must stay under the served directory.
Rejections never carry filesystem paths to the client.
"""
