from flask import Blueprint, jsonify, request

from medihub import db
from medihub.auth import current_principal
from medihub.config import BLOGS_PER_PAGE
from medihub.errors import NotFoundError, ValidationError
from medihub.identity import Role, clean_text, display_email, display_name
from medihub.models import Blog
from medihub.persistence import commit
from medihub.routes.common import get_payload

blog = Blueprint('blog', __name__, url_prefix='/blog')

AUTHOR_TYPES = {
    Role.PATIENT: 'user',
    Role.DOCTOR: 'doctor',
    Role.EMPLOYEE: 'employee',
}
ANONYMOUS_AUTHOR = ('Anonymous', 'anonymous@example.com', 'user')


def _author():
    role, principal = current_principal()
    if role not in AUTHOR_TYPES:
        return ANONYMOUS_AUTHOR
    return display_name(principal), display_email(principal), AUTHOR_TYPES[role]


def _image_urls(raw) -> list[str]:
    if isinstance(raw, list):
        candidates = raw
    else:
        candidates = clean_text(raw, 'imageUrls').split('\n')
    return [str(url).strip() for url in candidates if str(url).strip()]


def _serialize(post: Blog) -> dict:
    return {
        'id': post.id,
        'title': post.title,
        'theme': post.theme,
        'content': post.content,
        'authorName': post.author_name,
        'authorEmail': post.author_email,
        'authorType': post.author_type,
        'images': post.image_urls,
        'createdAt': post.created_at.isoformat(),
    }


@blog.route('/')
def list_posts():
    theme = request.args.get('filter', 'all')
    page = max(request.args.get('page', default=1, type=int) or 1, 1)

    query = Blog.query
    if theme != 'all':
        query = query.filter_by(theme=theme)

    total = query.count()
    total_pages = -(-total // BLOGS_PER_PAGE)
    posts = (
        query.order_by(Blog.created_at.desc(), Blog.id.desc())
        .offset((page - 1) * BLOGS_PER_PAGE)
        .limit(BLOGS_PER_PAGE)
        .all()
    )
    return jsonify({
        'blogs': [_serialize(post) for post in posts],
        'currentFilter': theme,
        'currentPage': page,
        'totalPages': total_pages,
        'hasPreviousPage': page > 1,
        'hasNextPage': page < total_pages,
    })


@blog.route('/submit', methods=['POST'])
def submit():
    payload = get_payload()
    title = clean_text(payload.get('title'), 'title')
    theme = clean_text(payload.get('theme'), 'theme')
    content = clean_text(payload.get('content'), 'content')
    if not title or not theme or not content:
        raise ValidationError(details='Title, theme, and content are required', redirect='/blog/post')

    author_name, author_email, author_type = _author()
    post = Blog(
        title=title,
        theme=theme,
        content=content,
        author_name=author_name,
        author_email=author_email,
        author_type=author_type,
        image_urls=_image_urls(payload.get('imageUrls')),
    )
    db.session.add(post)
    commit('post blog')
    return jsonify({'message': 'Blog posted', 'blog': _serialize(post), 'redirect': '/blog'}), 201


@blog.route('/<int:blog_id>')
def get_post(blog_id):
    post = db.session.get(Blog, blog_id)
    if post is None:
        raise NotFoundError('Blog not found')
    return jsonify(_serialize(post))
