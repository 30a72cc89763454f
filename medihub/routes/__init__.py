def register_blueprints(app):
    from medihub.routes.main import main
    from medihub.routes.patient import patient
    from medihub.routes.doctor import doctor
    from medihub.routes.admin import admin
    from medihub.routes.employee import employee
    from medihub.routes.supplier import supplier
    from medihub.routes.blog import blog
    from medihub.routes.chat import chat

    for blueprint in (main, patient, doctor, admin, employee, supplier, blog, chat):
        app.register_blueprint(blueprint)
