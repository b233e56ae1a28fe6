from setuptools import setup

setup(
    name='hfsize',
    version='1.0',
    author='Elliot Nunn',
    author_email='elliotnunn@me.com',
    description='Wrap a single file in a minimal read-only Macintosh HFS volume',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    license='MIT',
    classifiers=[
        'Programming Language :: Python :: 3 :: Only',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: MIT License',
        'Topic :: System :: Filesystems',
    ],
    packages=['hfsize'],
    install_requires=[],
    extras_require={'test': ['pytest']},
    scripts=['bin/HFSize'],
)
