"""FastAPI application factory wiring services, routers and middleware."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from storefront.admin.router import create_admin_router
from storefront.admin.service import AdminService
from storefront.api.http_setup import register_exception_handlers, register_http_middleware
from storefront.api.runtime_routes import HealthProbe, register_runtime_routes
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.gate import RoleGate
from storefront.auth.repository import UserRepository
from storefront.auth.service import AuthService, UserRepositoryProtocol
from storefront.auth.tokens import TokenCodec
from storefront.comments.repository import CommentRepository
from storefront.comments.router import create_comments_router
from storefront.comments.service import CommentRepositoryProtocol, CommentService
from storefront.core.config import AppConfig
from storefront.enquiries.repository import EnquiryRepository
from storefront.enquiries.router import create_enquiries_router
from storefront.enquiries.service import EnquiryRepositoryProtocol, EnquiryService
from storefront.mail.sender import MailerProtocol
from storefront.media.uploader import MediaUploaderProtocol
from storefront.orders.repository import OrderRepository
from storefront.orders.router import create_orders_router
from storefront.orders.service import OrderRepositoryProtocol, OrderService
from storefront.products.repository import ProductRepository
from storefront.products.router import create_products_router
from storefront.products.service import ProductRepositoryProtocol, ProductService
from storefront.users.router import create_users_router
from storefront.users.service import UserService
from storefront.videos.repository import VideoRepository
from storefront.videos.router import create_videos_router
from storefront.videos.service import VideoRepositoryProtocol, VideoService

LOGGER = logging.getLogger("storefront.api")


@dataclass(frozen=True)
class Repositories:
    """Persistence collaborators, one per collection."""

    users: UserRepositoryProtocol
    products: ProductRepositoryProtocol
    orders: OrderRepositoryProtocol
    enquiries: EnquiryRepositoryProtocol
    videos: VideoRepositoryProtocol
    comments: CommentRepositoryProtocol

    @classmethod
    def from_database(cls, db: Database) -> "Repositories":
        return cls(
            users=UserRepository(db["users"]),
            products=ProductRepository(db["products"]),
            orders=OrderRepository(db["orders"]),
            enquiries=EnquiryRepository(db["enquiries"]),
            videos=VideoRepository(db["videos"]),
            comments=CommentRepository(db["comments"]),
        )


def create_app(
    config: AppConfig,
    *,
    repositories: Repositories,
    media: MediaUploaderProtocol,
    mailer: MailerProtocol,
) -> FastAPI:
    """Build the API with every router mounted under ``/api/v1``."""
    app = FastAPI(title="Storefront API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
            "X-Correlation-ID",
            "X-Auth-Token",
        ],
    )
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, config=config, logger=LOGGER)

    auth_service = AuthService(repositories.users, TokenCodec(config.auth))
    deps = AuthDependencies(auth_service, RoleGate(repositories.users))
    probe = HealthProbe(environment=config.security.environment)

    product_service = ProductService(repositories.products, media)
    admin_service = AdminService(
        repositories.users, repositories.products, auth_service, config.auth
    )

    app.include_router(
        create_users_router(
            UserService(repositories.users, auth_service, media), deps, config
        )
    )
    app.include_router(
        create_admin_router(admin_service, product_service, deps, config, probe)
    )
    app.include_router(create_products_router(product_service, deps, config))
    app.include_router(
        create_orders_router(
            OrderService(repositories.orders, repositories.products, mailer), deps
        )
    )
    app.include_router(
        create_enquiries_router(EnquiryService(repositories.enquiries, mailer), deps)
    )
    app.include_router(
        create_videos_router(
            VideoService(repositories.videos, repositories.comments, media),
            deps,
            config,
        )
    )
    app.include_router(
        create_comments_router(
            CommentService(repositories.comments, repositories.videos), deps
        )
    )
    register_runtime_routes(app, probe=probe)
    return app
